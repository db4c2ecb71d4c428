from pydantic import BaseModel, Field


class PaymentInitiatedIn(BaseModel):
    paymentReference: str = Field(min_length=1, max_length=120)


class PaymentPaidIn(BaseModel):
    paymentReference: str = Field(min_length=1, max_length=120)


class PaymentFailedIn(BaseModel):
    reason: str = Field(default="declined", max_length=500)
