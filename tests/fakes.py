from content.application.port.media_storage_port import MediaStoragePort
from content.domain.media import StoredMedia
from pipeline.application.port.document_store_port import DocumentStorePort
from pipeline.domain.evaluation import matches, sort_documents
from pipeline.domain.expressions import resolve_path
from relationship.application.port.relationship_repository_port import Edge, RelationshipRepositoryPort


class InMemoryDocumentStore(DocumentStorePort):
    """컬렉션별 문서 목록을 그대로 들고 있는 저장소. fetch 호출을 기록합니다."""

    def __init__(self, collections: dict[str, list[dict]]):
        self.collections = collections
        self.calls = []

    async def fetch(self, collection, query=None):
        self.calls.append((collection, query))
        documents = [dict(d) for d in self.collections.get(collection, [])]
        if query is None:
            return documents
        if query.search is not None:
            needle = query.search.query.lower()
            documents = [
                d
                for d in documents
                if any(needle in str(resolve_path(d, f) or "").lower() for f in query.search.fields)
            ]
        documents = [d for d in documents if matches(d, query.predicates)]
        if query.sort:
            documents = sort_documents(documents, query.sort)
        documents = documents[query.skip:]
        if query.limit is not None:
            documents = documents[: query.limit]
        return documents


class FakeRelationshipRepository(RelationshipRepositoryPort):
    """
    집합으로 간선을 저장합니다.
    race_on_create가 켜지면 create 직전에 다른 요청이 같은 간선을 만든 상황을 흉내 냅니다.
    """

    def __init__(self):
        self.edges: set = set()
        self.race_on_create = False
        self.race_on_delete = False

    async def exists(self, edge: Edge) -> bool:
        return edge in self.edges

    async def create(self, edge: Edge) -> bool:
        if self.race_on_create:
            self.edges.add(edge)
        if edge in self.edges:
            return False
        self.edges.add(edge)
        return True

    async def delete(self, edge: Edge) -> bool:
        if self.race_on_delete:
            self.edges.discard(edge)
        if edge not in self.edges:
            return False
        self.edges.discard(edge)
        return True


class FakeMediaStorage(MediaStoragePort):
    """업로드 내용을 기억하고 예측 가능한 URL을 돌려줍니다."""

    def __init__(self, duration=None):
        self.duration = duration
        self.uploads = []

    async def upload(self, upload, folder):
        self.uploads.append((folder, upload.filename))
        return StoredMedia(url=f"https://media.test/{folder}/{upload.filename}", duration=self.duration)
