from __future__ import annotations

from typing import Any, Dict

import requests

from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext
from apitrend.stages.base import Stage


class FetchError(RuntimeError):
    pass


def fetch_collection(api_base: str, collection_uid: str, api_key: str, timeout: float) -> Dict[str, Any]:
    url = f"{api_base.rstrip('/')}/collections/{collection_uid}"
    try:
        res = requests.get(url, headers={"X-Api-Key": api_key}, timeout=timeout)
        res.raise_for_status()
        payload = res.json()
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch Postman collection: {e}") from e
    except ValueError as e:
        raise FetchError(f"Postman API returned invalid JSON: {e}") from e

    collection = payload.get("collection") if isinstance(payload, dict) else None
    if not isinstance(collection, dict):
        raise FetchError("Postman API response has no 'collection' object.")
    return collection


class FetchCollectionV1(Stage):
    def run(self, ctx: RunContext, store: ArtifactStore) -> Dict[str, Any]:
        postman = ctx.config.postman
        collection = fetch_collection(postman.api_base, postman.collection_uid, postman.api_key, postman.timeout)
        ctx.collection = collection
        rel = store.write_json("collection.json", collection)
        name = (collection.get("info") or {}).get("name", postman.collection_uid)
        print("✅ Collection fetched successfully from Postman Cloud")
        return {"message": f"fetched collection {name}", "artifacts": [rel]}
