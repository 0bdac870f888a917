"""
Convert raw input into schema objects for service-layer callers.

Routers receive bodies already validated by FastAPI; services may also be
called directly (jobs, webhooks, tests) with plain dicts, and those must
fail with the ledger's own ValidationError.
"""
import pydantic

from exceptions import ValidationError


def parse_model(model_cls, data):
     if isinstance(data, model_cls):
          return data
     try:
          return model_cls.model_validate(data)
     except pydantic.ValidationError as exc:
          errors = [
               {"loc": list(err.get("loc", ())), "msg": str(err.get("msg")), "type": err.get("type")}
               for err in exc.errors()
          ]
          raise ValidationError(f"Invalid {model_cls.__name__}", detail=errors) from exc
