"""Query composer interface."""

from abc import ABC, abstractmethod

from feedline.domain.query import ActivityQuery, ComposedQuery


class QueryComposer(ABC):
    """Turns an ActivityQuery into store-specific WHERE/JOIN fragments."""

    @abstractmethod
    def compose(self, query: ActivityQuery) -> ComposedQuery:
        """Compose the fragments of a query.

        Concerns are evaluated in a fixed order and each contributes at most
        one named fragment. Composing the same query twice must produce the
        same fragments.

        Args:
            query: Listing query

        Returns:
            Composed query carrying the effective (overridden) query
        """
        pass
