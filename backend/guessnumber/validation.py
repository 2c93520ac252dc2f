import json
from typing import Any, Union

from guessnumber.exceptions import InvalidPayload
from guessnumber.models import BetPayload


def decode_bet_payload(raw: Union[str, bytes, dict, Any]) -> BetPayload:
    """Turn an inbound bet frame into a BetPayload.

    Accepts a JSON text frame or an already decoded mapping with the fields
    `nickname` (str), `betAmount` (number) and `pickedNumber` (int). Range
    checks (positive stake, number in 1..10) are left to `Bet`.
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode('utf-8', errors='replace')
    if isinstance(raw, str):
        if not raw.strip():
            raise InvalidPayload('Request message cannot be null or empty.')
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise InvalidPayload(f'Invalid JSON format: {exc}') from exc
    if not isinstance(raw, dict):
        raise InvalidPayload(f'Bet must be a JSON object, got {type(raw).__name__}')

    nickname = raw.get('nickname')
    amount = raw.get('betAmount')
    picked = raw.get('pickedNumber')
    if not isinstance(nickname, str):
        raise InvalidPayload('nickname must be a string')
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise InvalidPayload('betAmount must be a number')
    if isinstance(picked, bool) or not isinstance(picked, int):
        raise InvalidPayload('pickedNumber must be an integer')
    try:
        amount = float(amount)
    except OverflowError as exc:
        raise InvalidPayload('betAmount is too large') from exc
    return BetPayload(nickname=nickname, bet_amount=amount, picked_number=picked)
