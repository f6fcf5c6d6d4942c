from digestpin.domain.image.service.resolver import ImageResolver

__all__ = ["ImageResolver"]
