from kisan_saathi.data.cities import CityRef
from kisan_saathi.tools.heuristics import HeuristicLocator


def test_india_timezone_is_a_no_op():
    h = HeuristicLocator()
    assert h.by_timezone("Asia/Kolkata") is None
    assert h.by_timezone("Asia/Calcutta") is None
    assert h.locate(tz="Asia/Kolkata", language="en-US", user_agent="Mozilla/5.0 (Linux; Android 13)",
                    network_info={"effectiveType": "4g"}) is None


def test_regional_timezone_table_is_used():
    h = HeuristicLocator({"Asia/Kathmandu": CityRef("Kathmandu", "Bagmati", 27.7172, 85.3240)})
    record = h.locate(tz="Asia/Kathmandu")
    assert (record.city, record.source, record.accuracy) == ("Kathmandu", "heuristic", 60)


def test_unknown_or_missing_timezone():
    h = HeuristicLocator()
    assert h.by_timezone("Europe/Paris") is None
    assert h.by_timezone(None) is None
