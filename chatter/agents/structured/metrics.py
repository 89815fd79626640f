"""
Fixing metrics - track how often structured output needs repair.

Observability into the fixing coordinator:
- Which schema error types are most common
- Which nodes produce malformed output most often
- How many runs exhaust the repair budget
"""

from collections import Counter
from typing import Any, Dict

from loguru import logger

from chatter.agents.structured.validator import SchemaErrorType


# Global metrics (in-memory)
fixing_metrics: Dict[str, Counter] = {
    "fixes": Counter(),           # {missing_field: 12, invalid_json: 3}
    "failed_attempts": Counter(),  # {invalid_json: 4}
    "exhausted": Counter(),       # {collect_info: 1}
    "by_node": Counter(),         # {collect_info: 9, final_answer: 2}
}


def record_fix(error_type: SchemaErrorType, node: str, success: bool, attempt_num: int = 1) -> None:
    """
    Record one repair attempt.

    Args:
        error_type: Semantic error type that triggered the repair
        node: Graph node that requested structured output
        success: Whether the repaired text validated
        attempt_num: Which attempt this was (1, 2, 3)
    """
    error_name = error_type.value
    fixing_metrics["by_node"][node] += 1

    if success:
        fixing_metrics["fixes"][error_name] += 1
        logger.debug(f"✅ Recorded fix: {error_name} at {node} (attempt {attempt_num})")
    else:
        fixing_metrics["failed_attempts"][error_name] += 1
        logger.debug(f"❌ Recorded failed repair: {error_name} at {node} (attempt {attempt_num})")


def record_exhausted(node: str) -> None:
    fixing_metrics["exhausted"][node] += 1


def get_metrics_summary() -> Dict[str, Any]:
    """
    Get a summary of fixing metrics.

    Example:
        >>> summary = get_metrics_summary()
        >>> summary["success_rate"]
        0.75
    """
    total_fixes = sum(fixing_metrics["fixes"].values())
    total_failures = sum(fixing_metrics["failed_attempts"].values())
    total_attempts = total_fixes + total_failures

    return {
        "total_attempts": total_attempts,
        "total_fixes": total_fixes,
        "total_failures": total_failures,
        "total_exhausted": sum(fixing_metrics["exhausted"].values()),
        "success_rate": total_fixes / total_attempts if total_attempts > 0 else 0.0,
        "by_error_type": {
            "fixes": dict(fixing_metrics["fixes"]),
            "failures": dict(fixing_metrics["failed_attempts"]),
        },
        "by_node": dict(fixing_metrics["by_node"]),
    }


def log_metrics_summary() -> None:
    """Log a summary of fixing metrics at INFO level."""
    summary = get_metrics_summary()

    if summary["total_attempts"] == 0:
        logger.info("No repair attempts recorded yet")
        return

    logger.info("=" * 60)
    logger.info("STRUCTURED OUTPUT FIXING METRICS")
    logger.info("=" * 60)
    logger.info(f"Total repair calls: {summary['total_attempts']}")
    logger.info(f"Successful repairs: {summary['total_fixes']}")
    logger.info(f"Failed repairs: {summary['total_failures']}")
    logger.info(f"Exhausted budgets: {summary['total_exhausted']}")
    logger.info(f"Repair success rate: {summary['success_rate']:.1%}")
    logger.info("=" * 60)

    all_errors = Counter()
    for category in ("fixes", "failures"):
        for error_type, count in summary["by_error_type"][category].items():
            all_errors[error_type] += count
    if all_errors:
        logger.info("Top error types:")
        for error_type, count in all_errors.most_common(5):
            logger.info(f"  - {error_type}: {count}")


def reset_metrics() -> None:
    """Reset all metrics (useful for testing)."""
    for counter in fixing_metrics.values():
        counter.clear()
    logger.debug("Fixing metrics reset")
