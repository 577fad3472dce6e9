import pytest

from enwikprep.reorder import Article, parse_articles, reorder, sort_articles


def _page(page_id, body):
    return [b"  <page>", b"    <id>%d</id>" % page_id, b"    " + body, b"  </page>"]


def _write(path, lines):
    path.write_bytes(b"".join(line + b"\n" for line in lines))


def test_parse_articles_finds_pages():
    lines = [b"header"] + _page(7, b"alpha") + _page(3, b"beta")
    articles = parse_articles(lines)
    assert articles == [Article(7, 1, 4), Article(3, 5, 8)]


def test_parse_articles_ignores_incomplete_page():
    lines = _page(5, b"x")[:3]
    assert parse_articles(lines) == []


def test_parse_articles_bad_id_raises():
    with pytest.raises(ValueError):
        parse_articles([b"<page>", b"<id>abc</id>", b"</page>"])


def test_reorder_follows_order_file(tmp_path):
    main = tmp_path / "main"
    order = tmp_path / "order"
    out = tmp_path / "out"
    pages = [_page(10, b"a"), _page(20, b"b"), _page(30, b"c")]
    _write(main, [line for page in pages for line in page])
    _write(order, [b"2", b"0", b"1"])
    positions = reorder(main, order, out, num_articles=3)
    assert positions == [2, 0, 1]
    expected = pages[2] + pages[0] + pages[1]
    assert out.read_bytes() == b"".join(line + b"\n" for line in expected)


def test_reorder_appends_missing_articles(tmp_path):
    main = tmp_path / "main"
    order = tmp_path / "order"
    out = tmp_path / "out"
    pages = [_page(10, b"a"), _page(20, b"b"), _page(30, b"c")]
    _write(main, [line for page in pages for line in page])
    _write(order, [b"1"])
    assert reorder(main, order, out, num_articles=3) == [1, 0, 2]


def test_reorder_rejects_out_of_range_position(tmp_path):
    main = tmp_path / "main"
    order = tmp_path / "order"
    _write(main, _page(1, b"a"))
    _write(order, [b"5"])
    with pytest.raises(ValueError):
        reorder(main, order, tmp_path / "out", num_articles=2)


def test_sort_undoes_reorder(tmp_path):
    main = tmp_path / "main"
    order = tmp_path / "order"
    shuffled = tmp_path / "shuffled"
    restored = tmp_path / "restored"
    pages = [_page(10, b"a"), _page(20, b"b"), _page(30, b"c"), _page(40, b"d")]
    _write(main, [line for page in pages for line in page])
    _write(order, [b"3", b"1", b"0", b"2"])
    reorder(main, order, shuffled, num_articles=4)
    articles = sort_articles(shuffled, restored)
    assert [a.id for a in articles] == [10, 20, 30, 40]
    assert restored.read_bytes() == main.read_bytes()


def test_sort_keeps_equal_ids_in_order(tmp_path):
    source = tmp_path / "in"
    out = tmp_path / "out"
    _write(source, _page(2, b"first") + _page(1, b"x") + _page(2, b"second"))
    sort_articles(source, out)
    text = out.read_bytes()
    assert text.index(b"first") < text.index(b"second")
    assert text.index(b"x") < text.index(b"first")