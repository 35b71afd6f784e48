from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Union

AppliesTo = Literal["facility", "inventory_item", "both"]


class TaxRulePayload(BaseModel):
    id: Optional[Union[str, int]] = None
    name: str
    rate: float = Field(0, ge=0, le=100)
    appliesTo: Optional[AppliesTo] = None
    active: bool = True
    isSuperAdminTax: bool = False
    company: Optional[Union[str, int]] = None
    type: Optional[str] = None  # jurisdiction / classification


class TaxCalculationRequest(BaseModel):
    subtotal: Union[int, float] = Field(..., ge=0)
    taxes: List[TaxRulePayload] = []
    appliesTo: AppliesTo = "both"
    companyId: Optional[Union[str, int]] = None
    isTaxable: bool = True
    isTaxInclusive: bool = False
    isTaxOnTax: bool = False
    currency: Optional[str] = None


class ApplicableTaxesRequest(BaseModel):
    taxes: List[TaxRulePayload] = []
    appliesTo: AppliesTo = "both"
    companyId: Optional[Union[str, int]] = None


class VatTaxRequest(BaseModel):
    taxes: List[TaxRulePayload] = []
    companyId: Optional[Union[str, int]] = None


class InvoiceFormatPayload(BaseModel):
    type: Literal["auto", "prefix", "paystack"] = "auto"
    prefix: Optional[str] = None
    nextNumber: Optional[int] = Field(None, ge=0)
    padding: Optional[int] = Field(None, ge=1, le=20)


class NextInvoiceRequest(BaseModel):
    invoiceFormat: InvoiceFormatPayload = InvoiceFormatPayload()
    lastInvoiceNumber: Optional[str] = None


class ParseInvoiceRequest(BaseModel):
    invoiceNumber: str


class ValidateInvoiceRequest(BaseModel):
    invoiceNumber: str
    invoiceFormat: InvoiceFormatPayload = InvoiceFormatPayload()


class InvoiceSuggestionsRequest(BaseModel):
    companyName: str
    invoiceFormat: InvoiceFormatPayload = InvoiceFormatPayload()
