import re

from ocs_client.constants import Checksum, Wanted
from ocs_client.request import build_request_xml, merge_query

TAG = re.compile(r"^  <([A-Z_0-9]+)>(.*)</\1>$")


def _tags(xml):
    lines = xml.splitlines()
    assert lines[0] == "<REQUEST>"
    assert lines[-1] == "</REQUEST>"
    pairs = []
    for line in lines[1:-1]:
        match = TAG.match(line)
        assert match, line
        pairs.append(match.groups())
    return pairs


def test_defaults_are_emitted_once_each():
    pairs = _tags(build_request_xml(merge_query()))

    assert pairs == [
        ("ENGINE", "FIRST"),
        ("ASKING_FOR", "INVENTORY"),
        ("CHECKSUM", "131071"),
        ("WANTED", "3"),
        ("OFFSET", "0"),
    ]


def test_overrides_replace_defaults_and_extras_are_appended():
    query = merge_query({"asking_for": "META", "tag": "SALES"}, offset=2)
    pairs = dict(_tags(build_request_xml(query)))

    assert pairs == {
        "ENGINE": "FIRST",
        "ASKING_FOR": "META",
        "CHECKSUM": "131071",
        "WANTED": "3",
        "OFFSET": "2",
        "TAG": "SALES",
    }


def test_keys_differing_only_by_case_collapse_into_one_tag():
    query = merge_query({"OFFSET": 7, "Engine": "LAST"})
    names = [name for name, _ in _tags(build_request_xml(query))]

    assert names.count("OFFSET") == 1
    assert names.count("ENGINE") == 1
    assert query["offset"] == 7
    assert query["engine"] == "LAST"


def test_flags_are_serialized_as_integers():
    query = merge_query(
        checksum=Checksum.HARDWARE | Checksum.SOFTWARE,
        wanted=Wanted.ACCOUNTINFO,
    )
    pairs = dict(_tags(build_request_xml(query)))

    assert pairs["CHECKSUM"] == str(0x10001)
    assert pairs["WANTED"] == "1"


def test_merge_does_not_touch_defaults():
    merge_query(engine="LAST")

    assert merge_query()["engine"] == "FIRST"
