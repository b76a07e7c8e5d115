from .model import Job, Step, Workflow, runner_labels, has_services, has_container_declaration
from .eligibility import Classification, Reason, Verdict, evaluate
from .commands import extract_missing_commands
from .scan import scan, ScanResult

__all__ = [
    "Job", "Step", "Workflow", "runner_labels", "has_services", "has_container_declaration",
    "Classification", "Reason", "Verdict", "evaluate", "extract_missing_commands",
    "scan", "ScanResult",
]
