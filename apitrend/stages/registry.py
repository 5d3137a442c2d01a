from __future__ import annotations

from apitrend.stages.allure_convert_v1 import AllureConvertV1
from apitrend.stages.allure_generate_v1 import AllureGenerateV1
from apitrend.stages.deploy_v1 import DeployV1
from apitrend.stages.fetch_collection_v1 import FetchCollectionV1
from apitrend.stages.merge_history_v1 import MergeHistoryV1
from apitrend.stages.newman_run_v1 import NewmanRunV1
from apitrend.stages.prepare_workspace_v1 import PrepareWorkspaceV1
from apitrend.stages.redact_v1 import RedactV1
from apitrend.stages.snapshot_history_v1 import SnapshotHistoryV1
from apitrend.stages.trend_record_v1 import TrendRecordV1
from apitrend.stages.webhook_notify_v1 import WebhookNotifyV1


def default_registry():
    return {
        "prepare_workspace_v1": PrepareWorkspaceV1(),
        "fetch_collection_v1": FetchCollectionV1(),
        "newman_run_v1": NewmanRunV1(),
        "allure_convert_v1": AllureConvertV1(),
        "redact_v1": RedactV1(),
        "trend_record_v1": TrendRecordV1(),
        "merge_history_v1": MergeHistoryV1(),
        "allure_generate_v1": AllureGenerateV1(),
        "snapshot_history_v1": SnapshotHistoryV1(),
        "deploy_v1": DeployV1(),
        "webhook_notify_v1": WebhookNotifyV1(),
    }
