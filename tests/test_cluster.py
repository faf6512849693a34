"""Tests for the greedy clustering pass."""

import pytest
from hypothesis import given, settings, strategies as st

from assetlens.assets.model import SimilarityGroup
from assetlens.similarity import cluster as cluster_module
from assetlens.similarity.cluster import ClusterOutcome, cluster
from assetlens.similarity.distance import distance
from assetlens.similarity.errors import AnalysisCancelled, ClusteringError
from assetlens.similarity.progress import CancelToken
from tests.helpers.asset_factory import fake_asset, make_digest


@pytest.fixture
def fixed_distances(monkeypatch):
    """Replace the metric with a lookup table keyed by asset display name."""
    def install(names, table):
        assets = [fake_asset(name) for name in names]
        digests = {asset: make_digest() for asset in assets}
        by_digest = {id(digest): asset.display_name for asset, digest in digests.items()}

        def lookup(a, b):
            pair = frozenset((by_digest[id(a)], by_digest[id(b)]))
            return table[pair]

        monkeypatch.setattr(cluster_module, "distance", lookup)
        return assets, digests

    return install


def names(group: SimilarityGroup):
    return group.primary.display_name, [(m.asset.display_name, m.distance) for m in group.similar]


class TestScenarios:
    def test_three_assets_single_link(self, fixed_distances):
        assets, digests = fixed_distances(
            ["A", "B", "C"],
            {frozenset("AB"): 0.3, frozenset("AC"): 0.9, frozenset("BC"): 0.9},
        )

        outcome = cluster(assets, digests, threshold=0.5)

        assert [names(g) for g in outcome.groups] == [("A", [("B", 0.3)])]
        assert [a.display_name for a in outcome.ungrouped] == ["C"]

    def test_empty_input(self):
        assert cluster([], {}, threshold=0.5) == ClusterOutcome(groups=[], ungrouped=[])

    def test_single_undecodable_asset(self):
        asset = fake_asset("broken")

        outcome = cluster([asset], {}, threshold=0.5)

        assert outcome.groups == []
        assert outcome.ungrouped == [asset]

    def test_five_identical_at_zero_threshold(self):
        assets = [fake_asset(f"img{i}") for i in range(5)]
        digest = make_digest({3, 7}, {1})
        digests = {asset: digest for asset in assets}

        outcome = cluster(assets, digests, threshold=0.0)

        assert len(outcome.groups) == 1
        group = outcome.groups[0]
        assert group.primary == assets[0]
        assert [m.asset for m in group.similar] == assets[1:]
        assert all(m.distance == 0.0 for m in group.similar)
        assert outcome.ungrouped == []

    def test_progress_over_hundred_assets(self):
        assets = [fake_asset(f"img{i:03d}") for i in range(100)]
        digests = {asset: make_digest(phash_bits={i % 64}, dhash_bits={(i * 7) % 64}) for i, asset in enumerate(assets)}
        values = []

        with_progress = cluster(assets, digests, threshold=0.05, progress=values.append)
        without_progress = cluster(assets, digests, threshold=0.05)

        assert values
        assert values == sorted(values)
        assert all(0.0 <= v <= 1.0 for v in values)
        assert len(values) <= len(assets)
        assert with_progress == without_progress


class TestBehaviour:
    def test_no_transitive_closure(self, fixed_distances):
        # B-C are close, but A claims B first and C is too far from A.
        assets, digests = fixed_distances(
            ["A", "B", "C"],
            {frozenset("AB"): 0.1, frozenset("AC"): 0.6, frozenset("BC"): 0.1},
        )

        outcome = cluster(assets, digests, threshold=0.2)

        assert [names(g) for g in outcome.groups] == [("A", [("B", 0.1)])]
        assert [a.display_name for a in outcome.ungrouped] == ["C"]

    def test_lonely_primary_does_not_block_later_groups(self, fixed_distances):
        assets, digests = fixed_distances(
            ["A", "B", "C"],
            {frozenset("AB"): 0.9, frozenset("AC"): 0.9, frozenset("BC"): 0.2},
        )

        outcome = cluster(assets, digests, threshold=0.5)

        assert [names(g) for g in outcome.groups] == [("B", [("C", 0.2)])]
        assert [a.display_name for a in outcome.ungrouped] == ["A"]

    def test_members_keep_scan_order_not_distance_order(self, fixed_distances):
        assets, digests = fixed_distances(
            ["A", "B", "C"],
            {frozenset("AB"): 0.4, frozenset("AC"): 0.1, frozenset("BC"): 0.3},
        )

        outcome = cluster(assets, digests, threshold=0.5)

        assert names(outcome.groups[0]) == ("A", [("B", 0.4), ("C", 0.1)])

    def test_threshold_boundary_is_inclusive(self):
        a, b = fake_asset("a"), fake_asset("b")
        digests = {a: make_digest(), b: make_digest(phash_bits={0, 1}, dhash_bits={5})}
        exact = distance(digests[a], digests[b])

        grouped = cluster([a, b], digests, threshold=exact)
        apart = cluster([a, b], digests, threshold=exact - 1e-9)

        assert len(grouped.groups) == 1
        assert grouped.groups[0].similar[0].distance == exact
        assert apart.groups == []

    def test_failed_assets_keep_input_position_in_ungrouped(self):
        a, broken, c = fake_asset("a"), fake_asset("broken"), fake_asset("c")
        digests = {a: make_digest(), c: make_digest(phash_bits=range(40), dhash_bits=range(40))}

        outcome = cluster([a, broken, c], digests, threshold=0.1)

        assert outcome.groups == []
        assert outcome.ungrouped == [a, broken, c]

    def test_repeated_paths_are_counted_once(self):
        a, b = fake_asset("a"), fake_asset("b")
        digests = {a: make_digest(), b: make_digest()}

        outcome = cluster([a, b, a], digests, threshold=0.0)

        assert len(outcome.groups) == 1
        assert outcome.groups[0].all_assets == (a, b)

    def test_mismatched_digests_abort(self):
        a, b = fake_asset("a"), fake_asset("b")
        digests = {a: make_digest(hash_size=8), b: make_digest(hash_size=16)}

        with pytest.raises(ClusteringError):
            cluster([a, b], digests, threshold=0.5)

    def test_cancelled_before_pass(self):
        a, b = fake_asset("a"), fake_asset("b")
        token = CancelToken()
        token.cancel()

        with pytest.raises(AnalysisCancelled):
            cluster([a, b], {a: make_digest(), b: make_digest()}, threshold=0.5, cancel=token)

    def test_cancelled_between_passes(self):
        assets = [fake_asset(f"img{i}") for i in range(10)]
        digests = {asset: make_digest(phash_bits={i}) for i, asset in enumerate(assets)}
        token = CancelToken()
        seen = []

        def cancel_after_first(fraction):
            seen.append(fraction)
            token.cancel()

        with pytest.raises(AnalysisCancelled):
            cluster(assets, digests, threshold=0.0, progress=cancel_after_first, cancel=token)
        assert len(seen) == 1


class TestPrimaryStrategies:
    def test_smallest_file_first(self):
        big, small = fake_asset("big", size=5000), fake_asset("small", size=10)
        digests = {big: make_digest(), small: make_digest()}

        outcome = cluster([big, small], digests, threshold=0.0, strategy="smallest-file")

        assert outcome.groups[0].primary == small

    def test_largest_file_first(self):
        small, big = fake_asset("small", size=10), fake_asset("big", size=5000)
        digests = {big: make_digest(), small: make_digest()}

        outcome = cluster([small, big], digests, threshold=0.0, strategy="largest-file")

        assert outcome.groups[0].primary == big

    def test_unknown_strategy(self):
        a = fake_asset("a")
        with pytest.raises(ClusteringError):
            cluster([a], {a: make_digest()}, threshold=0.0, strategy="random")


digest_bits = st.lists(
    st.tuples(
        st.sets(st.integers(min_value=0, max_value=15), max_size=6),
        st.sets(st.integers(min_value=0, max_value=15), max_size=6),
        st.booleans(),
    ),
    max_size=25,
)


class TestClusterProperties:
    @settings(max_examples=50, deadline=None)
    @given(entries=digest_bits, threshold=st.floats(min_value=0.0, max_value=0.2))
    def test_invariants(self, entries, threshold):
        assets = [fake_asset(f"img{i:02d}") for i in range(len(entries))]
        digests = {
            asset: make_digest(p, d)
            for asset, (p, d, decodable) in zip(assets, entries)
            if decodable
        }

        first = cluster(assets, digests, threshold)
        second = cluster(assets, digests, threshold)

        # Determinism
        assert first == second

        seen = [asset for group in first.groups for asset in group.all_assets]
        # No double assignment
        assert len(seen) == len(set(seen))
        # Completeness
        assert sorted(seen + first.ungrouped, key=lambda a: a.display_name) == assets

        for group in first.groups:
            assert group.similar
            for member in group.similar:
                assert member.distance <= threshold
                assert member.distance == distance(digests[group.primary], digests[member.asset])
