import pytest


def make_newman_report(passing: int = 1, failing: int = 1, started: int = 1700000000000):
    """newman JSON reporter output for one request per assertion."""
    executions = []
    for i in range(passing + failing):
        failed = i >= passing
        assertion = {"assertion": f"Status code is 200 ({i})"}
        if failed:
            assertion["error"] = {"name": "AssertionError", "message": "expected 500 to equal 200"}
        executions.append(
            {
                "item": {"name": f"Request {i}"},
                "request": {
                    "method": "GET",
                    "url": {"protocol": "https", "host": ["api", "example", "com"], "path": ["items", str(i)]},
                    "header": [{"key": "Authorization", "value": "Bearer abc123def456ghi789"}],
                },
                "response": {"code": 500 if failed else 200, "responseTime": 25},
                "assertions": [assertion],
            }
        )
    total = passing + failing
    return {
        "collection": {"info": {"name": "Kwant API"}},
        "run": {
            "stats": {
                "iterations": {"total": 1, "pending": 0, "failed": 0},
                "requests": {"total": total, "pending": 0, "failed": 0},
                "assertions": {"total": total, "pending": 0, "failed": failing},
            },
            "timings": {"started": started, "completed": started + 1500},
            "executions": executions,
        },
    }


@pytest.fixture
def newman_report():
    return make_newman_report
