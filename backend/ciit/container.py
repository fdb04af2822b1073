"""Dependency injection container: wires implementations to interfaces."""
from __future__ import annotations
from functools import lru_cache

from ciit.core import config
from ciit.application.catalog_app_service import CatalogAppService
from ciit.application.session_app_service import SessionAppService
from ciit.persistence.repositories.files.json_session_repository import JsonSessionRepository
from ciit.persistence.repositories.files.yaml_catalog_repository import YamlCatalogRepository
from ciit.persistence.watcher import CatalogWatcher


@lru_cache(maxsize=1)
def get_catalog_repo() -> YamlCatalogRepository:
    return YamlCatalogRepository(
        concepts_dir=config.CONCEPTS_DIR,
        topics_file=config.TOPICS_FILE,
        barriers_file=config.BARRIERS_FILE,
        images_dir=config.IMAGES_DIR,
    )


@lru_cache(maxsize=1)
def get_session_repo() -> JsonSessionRepository:
    return JsonSessionRepository(sessions_dir=config.SESSIONS_DIR)


@lru_cache(maxsize=1)
def get_catalog_watcher() -> CatalogWatcher:
    return CatalogWatcher(
        repo=get_catalog_repo(),
        poll_interval=config.CATALOG_POLL_INTERVAL,
        debounce=config.CATALOG_DEBOUNCE_SECONDS,
    )


@lru_cache(maxsize=1)
def get_catalog_app_service() -> CatalogAppService:
    return CatalogAppService(repo=get_catalog_repo())


@lru_cache(maxsize=1)
def get_session_app_service() -> SessionAppService:
    return SessionAppService(repo=get_session_repo(), catalog=get_catalog_repo())
