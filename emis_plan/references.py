"""
Reference resolution

A reference field holds the id of a document owned by some store: another
table of this service (Plan, Activity) or a collaborator (IncidentType,
Feature, Party). Stores answer a single question - which of these ids exist,
and what do they look like projected onto a field subset.

The resolver uses that for two separate jobs:
    - check_exists(): write path, before anything is persisted
    - populate():     read path, after documents are fetched

A store that cannot be reached raises CollaboratorUnavailableError, never
"not found".
"""

import asyncio
import logging
import threading
from typing import Dict, Iterable, List, Optional, Sequence

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import config
from .collaborators import Feature, IncidentType, Party
from .errors import CollaboratorUnavailableError, ReferenceNotFoundError
from .models import ACTIVITY_SPEC, PLAN_SPEC, Activity, Plan
from .schema_spec import POPULATION_MAX_DEPTH, EntitySpec, serialize

logger = logging.getLogger(__name__)


def project(document: dict, select: Optional[Sequence[str]]) -> dict:
    """Keep id plus the selected fields. select=None keeps everything."""
    if select is None:
        return dict(document)
    projected = {"id": document.get("id")}
    for name in select:
        projected[name] = document.get(name)
    return projected


# =============================================================================
# STORES
# =============================================================================

class ReferenceStore:
    """Resolves ids of one model name."""

    def __init__(self, model_name: str):
        self.model_name = model_name

    async def find(self, db: Session, ids: Iterable[str],
                   select: Optional[Sequence[str]] = None) -> Dict[str, dict]:
        """Return {id: projection} for the ids that exist."""
        raise NotImplementedError


class SqlReferenceStore(ReferenceStore):
    """Store backed by a SQLAlchemy model in the request session."""

    def __init__(self, model, model_name: Optional[str] = None, spec: Optional[EntitySpec] = None):
        super().__init__(model_name or getattr(model, "MODEL_NAME", model.__name__))
        self.model = model
        self.spec = spec

    def to_document(self, row) -> dict:
        if self.spec is not None:
            return serialize(row, self.spec)
        if hasattr(row, "to_document"):
            return row.to_document()
        return {
            column.name: getattr(row, column.name)
            for column in row.__table__.columns
        }

    async def find(self, db, ids, select=None):
        ids = list(dict.fromkeys(i for i in ids if i))
        if not ids:
            return {}
        query = db.query(self.model).filter(self.model.id.in_(ids))
        if hasattr(self.model, "deleted_at"):
            query = query.filter(self.model.deleted_at.is_(None))
        try:
            rows = query.all()
        except SQLAlchemyError as e:
            logger.error(f"{self.model_name} lookup failed: {e}")
            raise CollaboratorUnavailableError(self.model_name, str(e.__class__.__name__))
        return {row.id: project(self.to_document(row), select) for row in rows}


class HttpReferenceStore(ReferenceStore):
    """
    Store reached over HTTP: GET {base_url}/{id}

    200 -> resolves, 404 -> missing, anything else -> unavailable.
    """

    def __init__(self, model_name: str, base_url: str,
                 timeout: float = config.COLLABORATOR_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(model_name)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _get(self, client: httpx.AsyncClient, id: str) -> Optional[dict]:
        try:
            response = await client.get(f"{self.base_url}/{id}")
        except httpx.HTTPError as e:
            logger.error(f"{self.model_name} service unreachable: {e}")
            raise CollaboratorUnavailableError(self.model_name, str(e) or e.__class__.__name__)

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            logger.error(f"{self.model_name} service returned {response.status_code} for {id}")
            raise CollaboratorUnavailableError(self.model_name, f"HTTP {response.status_code}")

        try:
            document = response.json()
        except ValueError:
            document = None
        if not isinstance(document, dict):
            logger.error(f"{self.model_name} service returned an invalid body for {id}")
            raise CollaboratorUnavailableError(self.model_name, "invalid response body")
        # Remote directories may still expose Mongo style _id
        document.setdefault("id", document.get("_id", id))
        return document

    async def find(self, db, ids, select=None):
        ids = list(dict.fromkeys(i for i in ids if i))
        if not ids:
            return {}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            documents = await asyncio.gather(*(self._get(client, i) for i in ids))
        return {
            i: project(doc, select)
            for i, doc in zip(ids, documents)
            if doc is not None
        }


# =============================================================================
# RESOLVER
# =============================================================================

class ReferenceResolver:
    """Registry of stores by model name."""

    def __init__(self):
        self.stores: Dict[str, ReferenceStore] = {}

    def register(self, store: ReferenceStore):
        self.stores[store.model_name] = store
        return store

    def store_for(self, model_name: str) -> ReferenceStore:
        try:
            return self.stores[model_name]
        except KeyError:
            raise CollaboratorUnavailableError(model_name, "no store registered")

    async def check_exists(self, db: Session, spec: EntitySpec, instance):
        """
        Raise ReferenceNotFoundError listing every non-null reference that
        does not resolve. Null references are optional and always pass.
        """
        missing = {}
        for f in spec.references:
            if not f.reference.exists:
                continue
            value = getattr(instance, f.name, None)
            if value is None:
                continue
            store = self.store_for(f.reference.target)
            found = await store.find(db, [value], select=())
            if value not in found:
                missing[f.key] = {"target": f.reference.target, "id": value}
        if missing:
            raise ReferenceNotFoundError(missing)

    async def lookup_names(self, db: Session, spec: EntitySpec, instance) -> List[str]:
        """Names of the taggable referenced documents."""
        names = []
        for f in spec.references:
            if not f.taggable:
                continue
            value = getattr(instance, f.name, None)
            if value is None:
                continue
            found = await self.store_for(f.reference.target).find(db, [value], select=("name",))
            name = found.get(value, {}).get("name")
            if name:
                names.append(name)
        return names

    async def populate(self, db: Session, spec: EntitySpec, documents: List[dict],
                       depth: int = 0, max_depth: int = POPULATION_MAX_DEPTH) -> List[dict]:
        """
        Replace reference ids with projected sub-documents, in place.

        Only expands while depth < max_depth; the embedded projections are
        never populated themselves. Ids that no longer resolve stay raw.
        """
        if depth >= max_depth or not documents:
            return documents
        for f in spec.references:
            ref = f.reference
            if not ref.populate or depth >= ref.max_depth:
                continue
            ids = [doc.get(f.key) for doc in documents if isinstance(doc.get(f.key), str)]
            if not ids:
                continue
            found = await self.store_for(ref.target).find(db, ids, select=ref.select)
            for doc in documents:
                value = doc.get(f.key)
                if isinstance(value, str) and value in found:
                    doc[f.key] = dict(found[value])
        return documents


def build_resolver() -> ReferenceResolver:
    """
    Resolver with a store for every model plans reference. Collaborators use
    their remote directory when a *_SERVICE_URL is configured.
    """
    resolver = ReferenceResolver()
    resolver.register(SqlReferenceStore(Plan, config.PLAN_MODEL_NAME, spec=PLAN_SPEC))
    resolver.register(SqlReferenceStore(Activity, config.ACTIVITY_MODEL_NAME, spec=ACTIVITY_SPEC))

    collaborators = (
        (IncidentType, config.INCIDENT_TYPE_MODEL_NAME, config.INCIDENT_TYPE_SERVICE_URL),
        (Feature, config.FEATURE_MODEL_NAME, config.FEATURE_SERVICE_URL),
        (Party, config.PARTY_MODEL_NAME, config.PARTY_SERVICE_URL),
    )
    for model, model_name, url in collaborators:
        if url:
            logger.info(f"{model_name} references resolved via {url}")
            resolver.register(HttpReferenceStore(model_name, url))
        else:
            resolver.register(SqlReferenceStore(model, model_name))
    return resolver


_resolver: Optional[ReferenceResolver] = None
_lock = threading.Lock()


def get_resolver() -> ReferenceResolver:
    """FastAPI dependency: the process-wide resolver."""
    global _resolver
    if _resolver is None:
        with _lock:
            if _resolver is None:
                _resolver = build_resolver()
    return _resolver
