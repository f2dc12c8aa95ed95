"""Production container."""

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from feedline.util.di import PROVIDERS, get_provider


def create_container() -> AsyncContainer:
    """Build the container with the production variant of every provider.

    The database and cache backends come from ``Settings``, so nothing here
    touches the network until the first request resolves them.
    """
    providers = [get_provider(base)() for base in PROVIDERS]
    return make_async_container(*providers, FastapiProvider())


def setup_di(app: FastAPI, container: AsyncContainer) -> None:
    setup_dishka(container, app)
