from geoscan.sources.aggregate import aggregate


def test_aggregate_preserves_source_precedence():
    result = aggregate(
        "198.51.100.7",
        static=["1.1.1.1", "8.8.8.8"],
        provider=["192.0.2.53"],
        dynamic=["9.9.9.9"],
    )

    assert result.addresses == ["198.51.100.7", "1.1.1.1", "8.8.8.8", "192.0.2.53", "9.9.9.9"]


def test_aggregate_collapses_duplicates_to_first_occurrence():
    result = aggregate(
        "1.1.1.1",
        static=["1.1.1.1", "8.8.8.8", "8.8.8.8"],
        provider=["8.8.8.8", "192.0.2.53"],
        dynamic=["192.0.2.53", "1.1.1.1"],
    )

    assert result.addresses == ["1.1.1.1", "8.8.8.8", "192.0.2.53"]
    assert len(result) == len(set(result.addresses))
    assert result.sources_for("1.1.1.1") == ["self", "static", "dynamic"]
    assert result.sources_for("192.0.2.53") == ["provider", "dynamic"]


def test_aggregate_drops_malformed_dynamic_entries():
    result = aggregate("198.51.100.7", dynamic=["not-an-ip", "9.9.9.9", "", "300.1.1.1", None])

    assert "9.9.9.9" in result
    assert "not-an-ip" not in result
    assert result.addresses == ["198.51.100.7", "9.9.9.9"]


def test_aggregate_with_only_self():
    result = aggregate("198.51.100.7")

    assert result.addresses == ["198.51.100.7"]


def test_aggregate_accepts_ipv6_literals():
    result = aggregate("2001:db8::1", static=["2606:4700:4700::1111"], dynamic=["2001:db8::1"])

    assert result.addresses == ["2001:db8::1", "2606:4700:4700::1111"]


def test_aggregate_keeps_literal_identity():
    # no canonicalization: two spellings of the same IPv6 address stay distinct
    result = aggregate("2001:db8::1", dynamic=["2001:0db8::1"])

    assert len(result) == 2
