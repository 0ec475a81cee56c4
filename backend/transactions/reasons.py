"""
Transfer reasons as a tagged value (kind + free-text note).

The wire format stays the legacy display string ("Replacement Equipment - screen
cracked"); it is parsed once on the way in and the kind drives the workflow.
"""
from dataclasses import dataclass
from backend.core.exceptions import ValidationError
from .models import Transaction

NOTE_SEPARATOR = ' - '

TRANSFER_REASON_LABELS = {
    Transaction.REASON_NEW_EQUIPMENT: 'New Equipment',
    Transaction.REASON_REPLACEMENT_EQUIPMENT: 'Replacement Equipment',
    Transaction.REASON_REPAIRED: 'Repaired',
}

CONFIRMATION_PREFIX = 'Confirmed replacement: '


@dataclass(frozen=True)
class TransferReason:
    kind: str
    note: str = ''

    @property
    def label(self):
        return TRANSFER_REASON_LABELS[self.kind]

    @property
    def opens_pending_replacement(self):
        return self.kind == Transaction.REASON_REPLACEMENT_EQUIPMENT

    def __str__(self):
        if self.note:
            return f"{self.label}{NOTE_SEPARATOR}{self.note}"
        return self.label


def parse_transfer_reason(reason):
    """
    Parse a transfer reason string.

    Accepts one of the kind labels exactly, or a label followed by " - <note>".
    Returns None for an empty reason; raises ValidationError for anything else.
    """
    if not reason:
        return None
    for kind, label in TRANSFER_REASON_LABELS.items():
        if reason == label:
            return TransferReason(kind)
        if reason.startswith(label + NOTE_SEPARATOR):
            return TransferReason(kind, reason[len(label) + len(NOTE_SEPARATOR):].strip())
    raise ValidationError('Invalid reason provided')


def build_confirmation_reason(original_reason, replaced_asset_number=None, replaced_serial_number=None):
    """
    "Confirmed replacement: <original reason>" plus, when either replaced identifier
    is known, " | Replaced: Asset #<asset>, S/N: <serial>" (only the parts supplied).
    """
    text = f"{CONFIRMATION_PREFIX}{original_reason}"
    replaced = []
    if replaced_asset_number:
        replaced.append(f"Asset #{replaced_asset_number}")
    if replaced_serial_number:
        replaced.append(f"S/N: {replaced_serial_number}")
    if replaced:
        text += f" | Replaced: {', '.join(replaced)}"
    return text
