from digestpin.domain.workload.util.di.provider import WorkloadProvider

__all__ = ["WorkloadProvider"]
