"""
문서 저장 서비스 - Azure Cosmos DB 또는 로컬 JSON fallback

저장소는 키-값 형태로 문서 단위 읽기/쓰기/삭제만 제공한다.
"""
import os
import json
import logging
from config import Config

logger = logging.getLogger(__name__)

_storage_instance = None


def get_storage():
    """저장소 싱글턴 인스턴스 반환"""
    global _storage_instance
    if _storage_instance is None:
        if Config.use_cosmos_db():
            _storage_instance = CosmosStorage()
        else:
            _storage_instance = LocalJsonStorage()
    return _storage_instance


def set_storage(storage):
    """저장소 인스턴스 교체 (테스트/외부 주입용)"""
    global _storage_instance
    _storage_instance = storage


def reset_storage():
    """싱글턴 해제 - 다음 get_storage() 호출 시 설정에 따라 재생성"""
    set_storage(None)


class LocalJsonStorage:
    """로컬 JSON 파일 기반 저장소 (개발용 fallback)"""

    name = 'local-json'

    def __init__(self, filepath=None):
        self.filepath = filepath or Config.STORE_FILE
        os.makedirs(os.path.dirname(os.path.abspath(self.filepath)), exist_ok=True)
        if not os.path.exists(self.filepath):
            self._save_data({})
        logger.info(f"로컬 JSON 저장소 초기화 완료: {self.filepath}")

    def _load_data(self):
        try:
            with open(self.filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, FileNotFoundError):
            logger.warning(f"저장 파일을 읽을 수 없어 빈 저장소로 처리: {self.filepath}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save_data(self, data):
        with open(self.filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def get(self, key):
        """문서 반환 (없으면 None)"""
        return self._load_data().get(key)

    def set(self, key, value):
        """문서 전체 저장"""
        data = self._load_data()
        data[key] = value
        self._save_data(data)

    def delete(self, key):
        """문서 삭제 (없으면 무시)"""
        data = self._load_data()
        if key in data:
            del data[key]
            self._save_data(data)
            logger.info(f"문서 삭제: {key}")


class CosmosStorage:
    """Azure Cosmos DB 기반 저장소"""

    name = 'cosmos-db'
    DOC_TYPE = 'document'

    def __init__(self):
        from azure.cosmos import CosmosClient, PartitionKey
        self.client = CosmosClient(Config.COSMOS_DB_ENDPOINT, Config.COSMOS_DB_KEY)
        self.database = self.client.create_database_if_not_exists(id=Config.COSMOS_DATABASE_NAME)
        self.container = self.database.create_container_if_not_exists(
            id=Config.COSMOS_CONTAINER_NAME,
            partition_key=PartitionKey(path="/type")
        )
        logger.info("Azure Cosmos DB 저장소 초기화 완료")

    def get(self, key):
        """문서 반환 (없으면 None)"""
        from azure.cosmos.exceptions import CosmosResourceNotFoundError
        try:
            item = self.container.read_item(item=key, partition_key=self.DOC_TYPE)
        except CosmosResourceNotFoundError:
            return None
        return item.get('value')

    def set(self, key, value):
        """문서 전체 저장 (upsert)"""
        try:
            self.container.upsert_item(body={"id": key, "type": self.DOC_TYPE, "value": value})
        except Exception as e:
            logger.error(f"문서 저장 실패: {key} ({e})")
            raise

    def delete(self, key):
        """문서 삭제 (없으면 무시)"""
        from azure.cosmos.exceptions import CosmosResourceNotFoundError
        try:
            self.container.delete_item(item=key, partition_key=self.DOC_TYPE)
            logger.info(f"문서 삭제: {key}")
        except CosmosResourceNotFoundError:
            pass
