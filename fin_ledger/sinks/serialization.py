"""Shared serialization utilities for sinks and repositories."""

from dataclasses import asdict, fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar

from fin_ledger.exceptions import InvalidEntityStateError, SinkError
from fin_ledger.models.financial import (
    Account,
    AccountType,
    CardBrand,
    CreditCard,
    Goal,
    Transaction,
    TransactionType,
)

T = TypeVar("T")


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return obj
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert dataclass to dict with proper serialization."""
    result = {}
    for key, value in asdict(obj).items():
        result[key] = serialize_value(value)
    return result


def to_dict_fast(obj: Any) -> dict:
    """Convert a flat dataclass without the deep copy ``asdict()`` makes.

    Parameters
    ----------
    obj : Any
        A dataclass instance.

    Returns
    -------
    dict
        Serialized dictionary.
    """
    return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output.

    Decimals become strings so amounts survive a round trip to the cent.
    """
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    return value


# Field decoders per entity: name -> callable(raw) -> value.
# Raw values are ISO strings from JSON or already-typed values from a database.
def _datetime(raw: Any) -> datetime:
    return raw if isinstance(raw, datetime) else datetime.fromisoformat(raw)


def _date(raw: Any) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    return raw if isinstance(raw, date) else date.fromisoformat(raw)


def _opt(parse):
    return lambda raw: None if raw is None else parse(raw)


_DECODERS: dict[type, dict[str, Any]] = {
    Account: {
        "account_type": AccountType,
        "balance": Decimal,
        "created_at": _datetime,
        "updated_at": _opt(_datetime),
        "balance_date": _opt(_datetime),
    },
    CreditCard: {
        "card_brand": CardBrand,
        "available_limit": Decimal,
        "created_at": _datetime,
        "limit_date": _opt(_datetime),
        "updated_at": _opt(_datetime),
    },
    Goal: {
        "target_amount": Decimal,
        "current_amount": Decimal,
        "created_at": _datetime,
        "deadline": _opt(_date),
        "updated_at": _opt(_datetime),
    },
    Transaction: {
        "transaction_type": TransactionType,
        "date": _date,
        "amount": Decimal,
        "created_at": _opt(_datetime),
        "updated_at": _opt(_datetime),
    },
}


def from_dict(entity_cls: type[T], data: dict[str, Any]) -> T:
    """Rebuild an entity from its serialized form.

    Derived fields (``init=False``) are recomputed by the entity itself.
    Unknown keys are ignored.

    Raises
    ------
    SinkError
        If a required field is missing or a value cannot be decoded.
    """
    decoders = _DECODERS[entity_cls]
    kwargs: dict[str, Any] = {}
    try:
        for f in fields(entity_cls):
            if not f.init or f.name not in data:
                continue
            raw = data[f.name]
            decode = decoders.get(f.name)
            kwargs[f.name] = decode(raw) if decode is not None else raw
        return entity_cls(**kwargs)
    except (TypeError, ValueError, ArithmeticError, InvalidEntityStateError) as exc:
        raise SinkError(f"Cannot decode {entity_cls.__name__}: {exc}") from exc
