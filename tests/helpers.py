"""Payload builders shared by the tests."""


def make_payload(**overrides):
    """Create a PrusaLink-style GET /printer body."""
    base = {
        "state": {
            "text": "Operational",
            "flags": {
                "operational": True,
                "paused": False,
                "printing": False,
                "cancelling": False,
                "pausing": False,
                "sdReady": True,
                "error": False,
                "closedOnError": False,
                "ready": True,
                "busy": False,
                "finished": False,
            },
        },
        "telemetry": {
            "temp-bed": 60.1,
            "temp-nozzle": 210.4,
            "print-speed": 100,
            "z-height": 0.2,
            "material": "PETG",
        },
        "temperature": {
            "bed": {"actual": 60.0, "target": 60.0, "display": 60.0, "offset": 0.0},
            "tool0": {"actual": 210.0, "target": 215.0, "display": 215.0, "offset": 0.0},
            "tool1": {"actual": 25.0, "target": 0.0, "display": 0.0, "offset": 0.0},
            "chamber": {"actual": 31.0, "target": 0.0, "display": 0.0, "offset": 0.0},
        },
    }
    base.update(overrides)
    return base
