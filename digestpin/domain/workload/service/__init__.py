from digestpin.domain.workload.service.dispatcher import WorkloadDispatcher

__all__ = ["WorkloadDispatcher"]
