"""Shared fixtures: a throwaway data directory seeded with a small catalog."""
import os

import pytest
import yaml
from fastapi.testclient import TestClient

from ciit.application.catalog_app_service import CatalogAppService
from ciit.application.session_app_service import SessionAppService
from ciit.persistence.repositories.files.json_session_repository import JsonSessionRepository
from ciit.persistence.repositories.files.yaml_catalog_repository import YamlCatalogRepository

TOPICS = [
    {"id": "energy", "name": "Energy Transition", "description": "Clean power", "color": "amber"},
    {"id": "nature", "name": "Nature & Biodiversity", "description": "Land and oceans", "color": "green"},
]

BARRIERS = [
    {
        "id": "risk",
        "name": "Perceived Risk",
        "shortDescription": "Too risky",
        "description": "Returns feel uncertain",
        "color": "red",
    },
    {
        "id": "access",
        "name": "Access",
        "shortDescription": "Hard to find",
        "description": "No obvious products",
        "color": "blue",
    },
]

CONCEPTS = [
    {
        "id": "acme-fund",
        "name": "Acme Fund",
        "tagline": "Pooled climate equity",
        "category": "Funds",
        "layer": "product",
        "image": "",
        "topics": ["energy"],
        "details": [{"title": "How it works", "description": "Monthly contributions"}],
        "barrierSolutions": [{"barrierId": "risk", "explanation": "Diversified"}],
        "owner": "research-team",
    },
    {
        "id": "green-bond",
        "name": "Green Bond Ladder",
        "tagline": "Fixed income for forests",
        "category": "Bonds",
        "layer": "product",
        "image": "green-bond.jpg",
        "topics": ["nature", "energy"],
        "details": [],
    },
]


def write_yaml(path, data):
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False)


@pytest.fixture
def data_dir(tmp_path):
    concepts_dir = tmp_path / "concepts"
    concepts_dir.mkdir()
    (tmp_path / "sessions").mkdir()
    write_yaml(tmp_path / "topics.yaml", {"topics": TOPICS})
    write_yaml(tmp_path / "barriers.yaml", {"barriers": BARRIERS})
    for concept in CONCEPTS:
        write_yaml(concepts_dir / f"{concept['id']}.yaml", concept)
    return tmp_path


@pytest.fixture
def catalog_repo(data_dir):
    return YamlCatalogRepository(
        concepts_dir=str(data_dir / "concepts"),
        topics_file=str(data_dir / "topics.yaml"),
        barriers_file=str(data_dir / "barriers.yaml"),
        images_dir=str(data_dir / "images"),
    )


@pytest.fixture
def session_repo(data_dir):
    return JsonSessionRepository(sessions_dir=str(data_dir / "sessions"))


@pytest.fixture
def catalog_service(catalog_repo):
    return CatalogAppService(repo=catalog_repo)


@pytest.fixture
def session_service(session_repo, catalog_repo):
    return SessionAppService(repo=session_repo, catalog=catalog_repo)


@pytest.fixture
def client(catalog_service, session_service):
    from ciit.container import get_catalog_app_service, get_session_app_service
    from ciit.main import app

    app.dependency_overrides[get_catalog_app_service] = lambda: catalog_service
    app.dependency_overrides[get_session_app_service] = lambda: session_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def read_concept(data_dir):
    """Read a concept record straight from its YAML file."""

    def _read(concept_id):
        with open(os.path.join(data_dir, "concepts", f"{concept_id}.yaml"), encoding="utf-8") as f:
            return yaml.safe_load(f)

    return _read
