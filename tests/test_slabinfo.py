import pytest

from prockit.slabinfo import SlabInfo, parse_data, parse_meta, parse_version

HEADER = (
    "# name            <active_objs> <num_objs> <objsize> <objperslab> "
    "<pagesperslab> : tunables <limit> <batchcount> <sharedfactor> : "
    "slabdata <active_slabs> <num_slabs> <sharedavail>"
)

SAMPLE = "\n".join(
    [
        "slabinfo - version: 2.1",
        HEADER,
        "nf_conntrack_expect      0      0    208   39    2 : tunables    0    0    0 : slabdata      0      0      0",
        "dmaengine-unmap-2      100    128     16  256    1 : tunables    0    0    0 : slabdata  16389  16389      0",
        "kmalloc-64              60     64     64   64    1 : tunables    0    0    0 : slabdata      1      1      0",
    ]
) + "\n"


def test_parse_version():
    assert parse_version("slabinfo - version: 2.1") == "2.1"


def test_parse_version_blank():
    assert parse_version("   ") is None


def test_parse_meta():
    assert parse_meta(HEADER) == [
        "active_objs",
        "num_objs",
        "objsize",
        "objperslab",
        "pagesperslab",
        "limit",
        "batchcount",
        "sharedfactor",
        "active_slabs",
        "num_slabs",
        "sharedavail",
    ]


def test_parse_data():
    line = "nf_conntrack_expect      0      0    208   39    2 : tunables    0    0    0 : slabdata      0      0      0"
    name, values = parse_data(line)
    assert name == "nf_conntrack_expect"
    assert values == [0, 0, 208, 39, 2, 0, 0, 0, 0, 0, 0]


def test_parse_data_without_name():
    line = "0      0    208   39    2 : tunables    0    0    0 : slabdata      0      0      0"
    name, _ = parse_data(line)
    assert name != "nf_conntrack_expect"
    assert name == "0"


def test_parse_data_empty_line():
    assert parse_data("   ") is None


def test_parse_fetch():
    info = SlabInfo.parse(SAMPLE)
    assert info.fetch("nf_conntrack_expect", "objsize") == 208
    assert info.fetch("dmaengine-unmap-2", "active_slabs") == 16389


def test_fetch_missing():
    info = SlabInfo.parse(SAMPLE)
    assert info.fetch("nope", "objsize") is None
    assert info.fetch("kmalloc-64", "nope") is None


def test_names_in_file_order():
    info = SlabInfo.parse(SAMPLE)
    assert info.names() == ["nf_conntrack_expect", "dmaengine-unmap-2", "kmalloc-64"]


@pytest.mark.parametrize("content", ["", "slabinfo - version: 2.1", "\n" + HEADER])
def test_parse_rejects_bad_content(content):
    with pytest.raises(ValueError):
        SlabInfo.parse(content)


def test_from_proc_reads_file(tmp_path):
    path = tmp_path / "slabinfo"
    path.write_text(SAMPLE, encoding="utf-8")
    info = SlabInfo.from_proc(str(path))
    assert info.fetch("kmalloc-64", "num_objs") == 64


def test_from_proc_missing_file(tmp_path):
    with pytest.raises(OSError):
        SlabInfo.from_proc(str(tmp_path / "absent"))


def test_totals():
    info = SlabInfo.parse(SAMPLE)
    assert info.total_active_objs() == 160
    assert info.total_objs() == 192
    assert info.total_active_slabs() == 16390
    assert info.total_slabs() == 16390
    assert info.total_active_size() == 5440
    assert info.total_size() == 6144
    assert info.total_active_cache() == info.total_active_size()
    assert info.total_cache() == info.total_size()


def test_object_statistics():
    info = SlabInfo.parse(SAMPLE)
    assert info.object_minimum() == 16
    assert info.object_maximum() == 208
    assert info.object_avg() == 96


def test_object_statistics_empty():
    info = SlabInfo.parse("slabinfo - version: 2.1\n" + HEADER)
    assert (info.object_minimum(), info.object_avg(), info.object_maximum()) == (0, 0, 0)


def test_sort_default_descending_by_num_objs():
    info = SlabInfo.parse(SAMPLE).sort("o", False)
    assert info.names() == ["dmaengine-unmap-2", "kmalloc-64", "nf_conntrack_expect"]


def test_sort_unknown_letter_uses_num_objs_ascending():
    info = SlabInfo.parse(SAMPLE).sort("z", True)
    assert info.names() == ["nf_conntrack_expect", "kmalloc-64", "dmaengine-unmap-2"]


def test_sort_by_name():
    info = SlabInfo.parse(SAMPLE)
    assert info.sort("n", True).names() == [
        "dmaengine-unmap-2",
        "kmalloc-64",
        "nf_conntrack_expect",
    ]
    assert info.sort("n", False).names() == [
        "nf_conntrack_expect",
        "kmalloc-64",
        "dmaengine-unmap-2",
    ]


def test_sort_by_objsize():
    info = SlabInfo.parse(SAMPLE).sort("s", False)
    assert [info.fetch(n, "objsize") for n in info.names()] == [208, 64, 16]


def test_sort_by_utilisation():
    content = "\n".join(SAMPLE.splitlines()[:2] + SAMPLE.splitlines()[3:])
    info = SlabInfo.parse(content)
    assert info.sort("u", False).names() == ["kmalloc-64", "dmaengine-unmap-2"]
    assert info.sort("u", True).names() == ["dmaengine-unmap-2", "kmalloc-64"]