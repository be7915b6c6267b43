from property_manager.models.owner import Property, WorkOrder
from property_manager.models.photo import PhotoAssetMixin, PropertyPhoto, WorkOrderPhoto

__all__ = ["Property", "WorkOrder", "PhotoAssetMixin", "PropertyPhoto", "WorkOrderPhoto"]
