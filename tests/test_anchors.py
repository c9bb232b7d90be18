"""Unit tests for anchor records, the metric registry and classification."""

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from avfleet.anchors.classifier import anchor_debug_info, classify
from avfleet.anchors.public import latest_anchor, load_public_anchors
from avfleet.anchors.records import AnchorRecord, AnchorState
from avfleet.anchors.registry import (
    METRIC_REGISTRY,
    binding_field_map,
    binding_metrics_for_view,
    bound_fields,
    metrics_for_view,
    registry_entry,
)


def make_row(confidence, status, metric="paid_trips_per_week", year=2024, **extra):
    row = {
        'id': f"{confidence}-{status}-{metric}-{year}",
        'company': 'Waymo',
        'year': year,
        'metric': metric,
        'value': 1000,
        'unit': 'trips/week',
        'confidence': confidence,
        'status': status,
    }
    row.update(extra)
    return row


ALL_FLAG_COMBINATIONS = [
    make_row(confidence, status)
    for confidence in ('pending', 'approved', 'rejected', None)
    for status in ('proposed', 'anchored', 'annotated', 'deprecated', None)
]


class TestMetricRegistry:
    """Static registry lookups."""

    def test_metrics_for_view(self):
        """All metrics drawn on the net cash chart, binding or not."""
        assert metrics_for_view('netCash') == (
            'cumulative_net_cash', 'cash_loss_event', 'investment_event')

    def test_binding_metrics_for_view(self):
        """Only binding metrics are returned."""
        assert binding_metrics_for_view('netCash') == ('cumulative_net_cash',)
        assert binding_metrics_for_view('fleetSize') == ('fleet_size', 'vehicles_in_city')
        assert binding_metrics_for_view('map') == ('city_active',)

    def test_unknown_view_is_empty(self):
        """Unknown views have no metrics."""
        assert metrics_for_view('nope') == ()
        assert binding_metrics_for_view('nope') == ()

    def test_chart_view_ids(self):
        """Views use the presentation layer's chart ids, matched exactly."""
        assert binding_metrics_for_view('paidTrips') == ('paid_trips_per_week',)
        assert metrics_for_view('productionMiles') == ('cumulative_miles', 'production_miles_per_year')
        assert metrics_for_view('net_cash') == ()

    def test_binding_field_map_excludes_overlay_metrics(self):
        """Metrics with no simulation field, or not binding, never override."""
        field_map = binding_field_map()
        assert field_map['paid_trips_per_week'] == 'paid_trips_per_week'
        assert field_map['fleet_size'] == 'vehicles_production'
        assert field_map['cumulative_miles'] == 'cumulative_production_miles'
        assert 'cash_loss_event' not in field_map
        assert 'city_active' not in field_map  # binding but map-only
        assert 'city_pilot' not in field_map

    def test_bound_fields_are_distinct(self):
        """Two metrics mapping to one field appear once."""
        fields = bound_fields()
        assert len(fields) == len(set(fields))
        assert fields.count('vehicles_production') == 1

    def test_registry_is_immutable(self):
        """The registry is a tuple of frozen entries."""
        assert isinstance(METRIC_REGISTRY, tuple)
        with pytest.raises(Exception):
            METRIC_REGISTRY[0].binding = False

    def test_registry_entry_lookup(self):
        """Direct lookup by metric key."""
        assert registry_entry('cumulative_rides').sim_field == 'production_trips'
        assert registry_entry('not_a_metric') is None


class TestAnchorState:
    """(confidence, status) pairs collapse to one explicit state."""

    @pytest.mark.parametrize("confidence,status,expected", [
        ('approved', 'anchored', AnchorState.ANCHORED),
        ('approved', 'annotated', AnchorState.ANNOTATED),
        ('approved', 'proposed', AnchorState.PROPOSED),
        ('approved', 'deprecated', AnchorState.DEPRECATED),
        ('pending', 'proposed', AnchorState.PENDING),
        ('pending', 'anchored', AnchorState.PENDING),
        ('rejected', 'anchored', AnchorState.REJECTED),
        (None, None, AnchorState.PROPOSED),
    ])
    def test_from_flags(self, confidence, status, expected):
        """Each flag pair maps to a single state."""
        assert AnchorState.from_flags(confidence, status) is expected

    def test_only_anchored_is_binding(self):
        """Only approved + anchored pins the curve."""
        assert [s for s in AnchorState if s.is_binding] == [AnchorState.ANCHORED]


class TestAnchorRecord:
    """Parsing of raw anchor rows."""

    def test_month_zero_means_no_month(self):
        """A zero or blank month is treated as unspecified."""
        assert AnchorRecord(**make_row('approved', 'anchored', month=0)).has_month is False
        assert AnchorRecord(**make_row('approved', 'anchored', month='')).month is None
        assert AnchorRecord(**make_row('approved', 'anchored', month=8)).has_month is True

    def test_integer_ids_become_strings(self):
        """Store keys may be integers."""
        assert AnchorRecord(**make_row('approved', 'anchored', id=42)).id == '42'

    def test_extra_fields_kept(self):
        """Unknown store columns are carried, not rejected."""
        record = AnchorRecord(**make_row('approved', 'anchored', lat=37.7))
        assert record.model_extra['lat'] == 37.7

    def test_records_are_read_only(self):
        """The core never mutates anchor rows."""
        record = AnchorRecord(**make_row('approved', 'anchored'))
        with pytest.raises(Exception):
            record.value = 5

    def test_whole_number_values_stay_int(self):
        """Integer values keep their type and exactness; decimals stay float."""
        assert AnchorRecord(**make_row('approved', 'anchored', value=2 ** 60 + 1)).value == 2 ** 60 + 1
        assert isinstance(AnchorRecord(**make_row('approved', 'anchored')).value, int)
        assert isinstance(AnchorRecord(**make_row('approved', 'anchored', value=1.5)).value, float)

    def test_non_finite_values_rejected(self):
        """NaN, infinities and ints beyond float range fail validation."""
        for value in (float('nan'), float('inf'), -float('inf'), 10 ** 400):
            with pytest.raises(ValueError):
                AnchorRecord(**make_row('approved', 'anchored', value=value))


class TestClassify:
    """Bucketing of anchor rows."""

    def test_buckets_follow_predicates(self):
        """Every row in a bucket satisfies exactly that bucket's predicate."""
        split = classify(ALL_FLAG_COMBINATIONS)
        assert all(r.confidence == 'approved' and r.status == 'anchored' for r in split.binding_anchors)
        assert all(r.confidence == 'pending' for r in split.pending_points)
        assert all(r.confidence == 'approved' and r.status == 'annotated' for r in split.annotations)
        assert len(split.binding_anchors) == 1
        assert len(split.pending_points) == 5
        assert len(split.annotations) == 1

    def test_buckets_are_disjoint(self):
        """No row appears in two buckets."""
        split = classify(ALL_FLAG_COMBINATIONS)
        ids = [r.id for bucket in (split.binding_anchors, split.pending_points, split.annotations)
               for r in bucket]
        assert len(ids) == len(set(ids))

    def test_inert_rows_dropped(self):
        """Rejected, deprecated and approved+proposed rows land nowhere."""
        rows = [
            make_row('rejected', 'anchored'),
            make_row('approved', 'proposed'),
            make_row('approved', 'deprecated'),
        ]
        split = classify(rows)
        assert split.binding_anchors == []
        assert split.pending_points == []
        assert split.annotations == []

    def test_unknown_metric_still_classified(self):
        """Classification only looks at review flags."""
        split = classify([make_row('approved', 'anchored', metric='robotaxi_vibes')])
        assert len(split.binding_anchors) == 1

    def test_malformed_rows_dropped(self):
        """Rows that fail validation are skipped, not fatal."""
        rows = [
            make_row('approved', 'anchored', value='lots'),
            make_row('approved', 'anchored', year=None),
            make_row('approved', 'anchored'),
        ]
        split = classify(rows)
        assert len(split.binding_anchors) == 1

    def test_accepts_records(self):
        """Already-parsed records pass through unchanged."""
        record = AnchorRecord(**make_row('approved', 'annotated'))
        split = classify([record])
        assert split.annotations == [record]

    def test_preserves_input_order(self):
        """Buckets keep the order rows arrived in."""
        rows = [make_row('approved', 'anchored', year=y) for y in (2024, 2022, 2023)]
        assert [r.year for r in classify(rows).binding_anchors] == [2024, 2022, 2023]


class TestDebugInfo:
    """Diagnostics over a batch of rows."""

    def test_counts_and_unknown_metrics(self):
        """Counts per bucket plus unknown metric keys."""
        rows = [
            make_row('approved', 'anchored'),
            make_row('pending', 'proposed', metric='zz_unknown'),
            make_row('approved', 'annotated', metric='aa_unknown'),
            make_row('rejected', 'proposed'),
        ]
        info = anchor_debug_info(rows)
        assert info.total_rows == 4
        assert info.binding_count == 1
        assert info.pending_count == 1
        assert info.annotation_count == 1
        assert info.unknown_metrics == ['aa_unknown', 'zz_unknown']


class TestPublicAnchors:
    """Bundled, cited public datapoints."""

    def test_load_public_anchors(self):
        """Every bundled row is binding and carries its citation."""
        anchors = load_public_anchors()
        assert len(anchors) == 6
        assert all(a.state is AnchorState.ANCHORED for a in anchors)
        assert all(a.source_url and a.source_publisher for a in anchors)
        assert {a.metric for a in anchors} == {'paid_trips_per_week', 'cumulative_rides'}

    def test_public_anchors_classify_as_binding(self):
        """The bundled set passes straight through classify()."""
        split = classify(load_public_anchors())
        assert len(split.binding_anchors) == 6
        assert split.pending_points == []

    def test_latest_anchor(self):
        """The most recent report wins by year, then month."""
        latest = latest_anchor(load_public_anchors())
        assert (latest.year, latest.month, latest.value) == (2026, 2, 400000)
        assert latest_anchor([]) is None

    def test_load_from_yaml_path(self, tmp_path):
        """A custom file can replace the bundled anchors."""
        path = tmp_path / "anchors.yaml"
        path.write_text(
            "anchors:\n"
            "  - {id: a1, year: 2021, metric: fleet_size, value: 300}\n"
        )
        anchors = load_public_anchors(yaml_path=str(path))
        assert [a.id for a in anchors] == ['a1']
        assert anchors[0].state is AnchorState.ANCHORED
