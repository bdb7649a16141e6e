"""Garment IMS — SQLAlchemy models."""
from garment_ims.models.audit import AuditLog, LabelPrintLog
from garment_ims.models.batch import BarcodeBatch, BatchStatus, GSTLogic
from garment_ims.models.design import ProductMaster
from garment_ims.models.master_data import Color, Floor, ProductGroup, Size, Vendor
from garment_ims.models.purchase_invoice import PurchaseInvoice, PurchaseInvoiceItem, SupplyType
from garment_ims.models.sequence import BarcodeSequence

__all__ = [
    "Floor", "ProductGroup", "Color", "Size", "Vendor",
    "BarcodeBatch", "BatchStatus", "GSTLogic",
    "ProductMaster",
    "PurchaseInvoice", "PurchaseInvoiceItem", "SupplyType",
    "BarcodeSequence",
    "AuditLog", "LabelPrintLog",
]
