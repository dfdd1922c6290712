from __future__ import annotations

import unittest

from contracts.words import SegmentKind
from word_boxes.segmenter import (
    SegmenterRules,
    classify_cluster,
    emitted_segments,
    inclusion_table,
    segment_clusters,
)


class TestSegmenter(unittest.TestCase):
    def test_hello_world_segments(self) -> None:
        segs = segment_clusters(list("Hello, world!"))
        self.assertEqual(
            [(s.kind, s.text) for s in segs],
            [
                (SegmentKind.WORD, "Hello"),
                (SegmentKind.DELIMITER, ","),
                (SegmentKind.WHITESPACE, " "),
                (SegmentKind.WORD, "world"),
                (SegmentKind.DELIMITER, "!"),
            ],
        )

    def test_segments_partition_the_run(self) -> None:
        clusters = list("  a-b,\tc  ??") + ["fi", ""]
        segs = segment_clusters(clusters)
        self.assertEqual(segs[0].start, 0)
        self.assertEqual(segs[-1].end, len(clusters))
        for prev, nxt in zip(segs, segs[1:]):
            self.assertEqual(prev.end, nxt.start)
            self.assertNotEqual(prev.kind, nxt.kind)  # maximal runs
        self.assertEqual("".join(s.text for s in segs), "".join(clusters))

    def test_empty_run_has_no_segments(self) -> None:
        self.assertEqual(segment_clusters([]), [])
        self.assertEqual(emitted_segments([], include_delimiters=True, include_whitespace=True), [])

    def test_cluster_classes(self) -> None:
        self.assertEqual(classify_cluster(" "), SegmentKind.WHITESPACE)
        self.assertEqual(classify_cluster(" "), SegmentKind.WHITESPACE)
        self.assertEqual(classify_cluster("—"), SegmentKind.DELIMITER)
        self.assertEqual(classify_cluster("«"), SegmentKind.DELIMITER)
        self.assertEqual(classify_cluster("$"), SegmentKind.DELIMITER)
        self.assertEqual(classify_cluster(". "), SegmentKind.DELIMITER)
        self.assertEqual(classify_cluster("é"), SegmentKind.WORD)
        self.assertEqual(classify_cluster("3"), SegmentKind.WORD)
        self.assertEqual(classify_cluster(""), SegmentKind.WORD)

    def test_inclusion_filters(self) -> None:
        clusters = list("Hello, world!")
        self.assertEqual([s.text for s in emitted_segments(clusters)], ["Hello", "world"])
        self.assertEqual(
            [s.text for s in emitted_segments(clusters, include_delimiters=True)],
            ["Hello", ",", "world", "!"],
        )
        self.assertEqual(
            [s.text for s in emitted_segments(clusters, include_whitespace=True)],
            ["Hello", " ", "world"],
        )
        self.assertEqual(
            [s.text for s in emitted_segments(clusters, include_delimiters=True, include_whitespace=True)],
            ["Hello", ",", " ", "world", "!"],
        )

    def test_all_filtered_run_emits_nothing(self) -> None:
        self.assertEqual(emitted_segments(list(" , ; ")), [])
        self.assertEqual(emitted_segments(list("   "), include_delimiters=True), [])

    def test_word_count_is_invariant_to_flags(self) -> None:
        clusters = list("It's 3 p.m. -- «voilà», 42!")
        counts = set()
        for d in (False, True):
            for w in (False, True):
                segs = emitted_segments(clusters, include_delimiters=d, include_whitespace=w)
                counts.add(sum(1 for s in segs if s.kind == SegmentKind.WORD))
        self.assertEqual(len(counts), 1)

    def test_inclusion_table_always_keeps_words(self) -> None:
        for d in (False, True):
            for w in (False, True):
                table = inclusion_table(include_delimiters=d, include_whitespace=w)
                self.assertTrue(table[SegmentKind.WORD])
                self.assertEqual(table[SegmentKind.DELIMITER], d)
                self.assertEqual(table[SegmentKind.WHITESPACE], w)

    def test_custom_rules(self) -> None:
        rules = SegmenterRules(extra_delimiters=frozenset({"#"}), delimiter_categories=frozenset())
        segs = segment_clusters(list("a#b,c"), rules)
        self.assertEqual([s.text for s in segs], ["a", "#", "b,c"])


if __name__ == "__main__":
    unittest.main()
