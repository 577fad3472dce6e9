# enwikprep

Reversible transforms that reshape a Wikipedia XML dump so that it is easier
to compress, a word dictionary transform for text, and a few helpers for
self-extracting archives.

## What it does

- **Word dictionary** (`enwikprep.dictionary.Dictionary`): replaces
  lower-case words found in a word list with one- to three-byte codes,
  marks capitalised and upper-case words with marker bytes, folds `&quot;`
  into one byte and escapes bytes that would collide with the markers.
  `encode` and `decode` are inverses; `decode_byte` reads one original byte
  at a time from a binary stream.
- **Dump tools**:
  - `enwikprep.splitting`: `split_for_compression` and
    `split_for_decompression` cut a dump into intro, main body and coda at
    fixed line numbers.
  - `enwikprep.reorder`: `parse_articles` finds `<page>` blocks and their
    `<id>`; `reorder` writes pages in the order given by an order file
    (pages it leaves out follow in their original order); `sort_articles`
    writes them sorted by id.
  - `enwikprep.phda9`: the `prepr1`..`prepr6` rewrites shorten entities and
    move page ids, revision metadata and language links out of the way;
    `resto1`..`resto5` undo them. `phda9_prepr(workdir)` runs the forward
    chain on `.main_reordered` and `phda9_resto(workdir)` the reverse chain
    on `.main_decomp`. `cat` and `sed` are the small file helpers they use.
- **Archive trailer** (`enwikprep.selfextract`): `HeaderInfo` holds three
  little-endian 32-bit sizes; `write_header` and `read_header` store and load
  it. `selfextract_comp` and `selfextract_decomp` cut a binary or archive
  into its parts using the trailer at its end, and run the given program
  with `-d source target` to unpack the compressed dictionary (and, for
  `selfextract_comp`, the article order).
- **Bit-history states** (`enwikprep.states`): `State` and the `RunMap`
  run-length state machine with its starting probabilities.

## Limits

- The split line numbers in `enwikprep.splitting` and the block sizes in
  `enwikprep.phda9` (`TMP1A_SIZE`, `TMP2A_SIZE`, `OUT5_SIZE` and the
  others) are fixed for the full `enwik9` dump; `resto1` and `resto2` only
  work on data of exactly that shape.
- The package does not compress anything itself: it has no entropy coder
  or model, no detection of binary block types, and no command-line tool.
  Its functions are meant to be called from Python.

## Install

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Library use

```python
from enwikprep.dictionary import Dictionary

words = b"the\nquick\nbrown\nfox\n"
d = Dictionary(words)
packed = d.encode(b"The quick brown fox")
assert d.decode(packed) == b"The quick brown fox"
```

Sorting pages of a dump by id:

```python
from enwikprep.reorder import sort_articles

articles = sort_articles("pages.xml", "pages_sorted.xml")
print([a.id for a in articles])
```

Writing and reading an archive trailer:

```python
from enwikprep.selfextract import HeaderInfo, read_header, write_header

write_header("header.dat", HeaderInfo(1000, 200, 50000))
assert read_header("header.dat").decomp_input_size == 50000
```