import calendar
import datetime
import re

WARRANTY_PATTERN = re.compile(r'(\d+)\s*(year|month|day|week)s?', re.IGNORECASE)


def split_serial_numbers(serial_number):
    """Split a comma-joined serial string into distinct, non-empty serials"""
    if not serial_number:
        return []
    serials = []
    for raw in serial_number.split(','):
        serial = raw.strip()
        if serial and serial not in serials:
            serials.append(serial)
    return serials


def _add_months(start, months):
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def calculate_warranty_expiry(warranty, start_date=None):
    """
    Turn a warranty description such as "2 years", "6 months", "3 weeks" or
    "10 days" into an expiry date counted from start_date (today by default).
    Returns None when the text carries no recognisable period.
    """
    if not warranty:
        return None
    match = WARRANTY_PATTERN.search(warranty)
    if not match:
        return None

    amount = int(match.group(1))
    unit = match.group(2).lower()
    if start_date is None:
        start_date = datetime.date.today()
    elif isinstance(start_date, datetime.datetime):
        start_date = start_date.date()

    if unit == 'year':
        return _add_months(start_date, amount * 12)
    if unit == 'month':
        return _add_months(start_date, amount)
    if unit == 'week':
        return start_date + datetime.timedelta(weeks=amount)
    return start_date + datetime.timedelta(days=amount)


def find_duplicate_serial(serial_number, exclude_item_id=None):
    """
    Look for any of the given serials on another inventory item (case-insensitive).

    Returns (serial, existing_item_name) for the first clash, or None.
    """
    from .models import InventoryItem

    new_serials = split_serial_numbers(serial_number)
    if not new_serials:
        return None

    queryset = InventoryItem.objects.exclude(serial_number='')
    if exclude_item_id:
        queryset = queryset.exclude(pk=exclude_item_id)

    for item in queryset.only('name', 'serial_number').iterator():
        existing = {s.lower() for s in item.serial_numbers}
        for serial in new_serials:
            if serial.lower() in existing:
                return serial, item.name
    return None
