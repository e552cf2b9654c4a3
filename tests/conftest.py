"""Shared fixtures for docproof tests."""

import asyncio

import pytest

from docproof.linearization.encoder import MerkleMapFactory, PathValueEncoder
from docproof.primitives.field import PALLAS
from docproof.protocol.backend import Backend
from docproof.protocol.verifier import Verifier


@pytest.fixture(scope="session")
def algebra():
    return PALLAS


@pytest.fixture(scope="session")
def encoder(algebra):
    return PathValueEncoder(algebra)


@pytest.fixture(scope="session")
def factory(algebra, encoder):
    return MerkleMapFactory(algebra, encoder)


@pytest.fixture(scope="session")
def backend(encoder):
    return asyncio.run(Backend.compile(encoder=encoder))


@pytest.fixture(scope="session")
def verifier(encoder):
    return asyncio.run(Verifier.create(encoder))
