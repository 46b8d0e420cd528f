from .activity import ActivityMarker
from .reconciler import RecoveredState, RecoveryReconciler, RecoverySummary

__all__ = ["ActivityMarker", "RecoveredState", "RecoveryReconciler", "RecoverySummary"]
