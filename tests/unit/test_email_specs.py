import pytest

from storefront.emails.specs import extract_dimensions, part_specs, split_specs


@pytest.mark.parametrize("part_number, expected", [
    ("6205-25x52", "6205|25mm|52mm"),
    ("NU205 25X52X15", "NU205|25mm|52mm"),
    ("6205-2RS 25 x 52 x 15", "6205-2RS|25mm|52mm"),
    ("UC204 20mm x 47mm", "UC204|20mm|47mm"),
    ("6001", "6001|N/A|N/A"),
])
def test_part_specs(part_number, expected):
    assert part_specs(part_number) == expected


def test_missing_part_number_uses_product_name():
    assert part_specs(None, fallback_model="Deep groove bearing") == "Deep groove bearing|N/A|N/A"
    assert part_specs("") == "N/A|N/A|N/A"


def test_decimal_dimensions_are_normalized():
    assert extract_dimensions("HK 6,5x10") == ("6.5mm", "10mm")


def test_split_specs_pads_missing_fields():
    assert split_specs("6205|25mm|52mm") == ("6205", "25mm", "52mm")
    assert split_specs("6205") == ("6205", "N/A", "N/A")
