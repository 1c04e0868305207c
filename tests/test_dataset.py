"""
Tests for feature descriptors, value sources and dataset assembly

Covers:
1. Matrix shape for full cloud and subsets
2. Column values (coordinates, colors, scalar fields)
3. Ground truth lookup and label narrowing
4. Validation errors (empty set, unknown field, missing colors, cloud mismatch)
"""

import numpy as np
import pytest
import logging

from pointmasc.core import PointCloud, row_point_indices
from pointmasc.errors import ConfigurationError, DataError, ErrorKind
from pointmasc.features import DatasetBuilder, FeatureDescriptor, FeatureType, SourceKind, resolve_source

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def make_cloud(n_points=100, with_colors=True, seed=0, name="synthetic"):
    """Synthetic cloud: label = 1 if X > 0 else 0"""
    rng = np.random.default_rng(seed)
    coords = rng.uniform(-10, 10, size=(n_points, 3))
    colors = rng.integers(0, 256, size=(n_points, 3)) if with_colors else None
    fields = {
        "Intensity": rng.uniform(0, 1, size=n_points),
        "Classification": (coords[:, 0] > 0).astype(np.float32),
    }
    return PointCloud(coords, colors, fields, name=name)


def all_features(cloud):
    return [
        FeatureDescriptor.coordinate(cloud, "x"),
        FeatureDescriptor.coordinate(cloud, "z"),
        FeatureDescriptor.color(cloud, "green"),
        FeatureDescriptor.scalar_field(cloud, "Intensity"),
    ]


def test_full_cloud_shape():
    """Without subset: one row per point, one column per feature"""
    cloud = make_cloud(n_points=137)
    features = all_features(cloud)

    dataset = DatasetBuilder().build(features, cloud)

    assert dataset.data.shape == (137, 4), f"Unexpected shape {dataset.data.shape}"
    assert dataset.data.dtype == np.float32
    assert dataset.labels is None, "Labels requested only with with_labels=True"
    assert dataset.feature_names == ["X", "Z", "green", "Intensity"]
    assert np.array_equal(dataset.point_indices, np.arange(137))


def test_subset_rows_match_full_assembly():
    """Row i of a subset dataset equals full-cloud row subset[i]"""
    cloud = make_cloud(n_points=80)
    features = all_features(cloud)
    indices = [42, 3, 3, 79, 0]
    subset = cloud.subset(indices)

    builder = DatasetBuilder()
    full = builder.build(features, cloud, with_labels=True)
    partial = builder.build(features, cloud, subset, with_labels=True)

    assert partial.data.shape == (len(indices), len(features))
    assert np.array_equal(partial.data, full.data[indices]), "Subset rows differ from full assembly"
    assert np.array_equal(partial.labels, full.labels[indices])
    assert list(partial.point_indices) == indices


def test_coordinate_column_equals_raw_x():
    cloud = make_cloud(n_points=50)
    dataset = DatasetBuilder().build([FeatureDescriptor.coordinate(cloud, "x")], cloud)

    expected = cloud.coords[:, 0].astype(np.float32)
    assert np.array_equal(dataset.data[:, 0], expected), "X column must equal raw X (float32)"


def test_color_and_scalar_columns():
    cloud = make_cloud(n_points=30)
    features = [FeatureDescriptor.color(cloud, "r"), FeatureDescriptor.scalar_field(cloud, "Intensity")]

    dataset = DatasetBuilder().build(features, cloud)

    assert np.array_equal(dataset.data[:, 0], cloud.colors[:, 0].astype(np.float32))
    sf_index = cloud.get_scalar_field_index_by_name("Intensity")
    assert np.array_equal(dataset.data[:, 1], cloud.get_scalar_field(sf_index))


def test_value_source_reads_single_point():
    cloud = make_cloud(n_points=20)

    y_source = resolve_source(FeatureDescriptor.coordinate(cloud, "y"), cloud)
    blue_source = resolve_source(FeatureDescriptor.color(cloud, "b"), cloud)

    assert y_source.kind is SourceKind.DIM_Y
    assert y_source.value_at(7) == float(cloud.coords[7, 1])
    assert blue_source.value_at(3) == float(cloud.colors[3, 2])


def test_dataset_is_read_only():
    cloud = make_cloud(n_points=10)
    dataset = DatasetBuilder().build(all_features(cloud), cloud, with_labels=True)

    with pytest.raises(ValueError):
        dataset.data[0, 0] = 1.0
    with pytest.raises(ValueError):
        dataset.labels[0] = 5


def test_labels_truncated_to_integer_codes():
    coords = np.zeros((4, 3))
    cloud = PointCloud(coords, scalar_fields={"Classification": [1.7, -1.7, 2.0, 6.0]})

    dataset = DatasetBuilder().build([FeatureDescriptor.coordinate(cloud, "x")], cloud, with_labels=True)

    assert dataset.labels.dtype == np.int32
    assert list(dataset.labels) == [1, -1, 2, 6]


def test_ground_truth_as_first_field_is_found():
    """Field index 0 is a valid hit, not a 'not found' sentinel"""
    coords = np.zeros((3, 3))
    cloud = PointCloud(coords, scalar_fields={"Classification": [2, 5, 2], "Other": [0, 0, 0]})
    assert cloud.get_scalar_field_index_by_name("Classification") == 0

    dataset = DatasetBuilder().build([FeatureDescriptor.scalar_field(cloud, "Other")], cloud, with_labels=True)
    assert list(dataset.labels) == [2, 5, 2]


def test_empty_feature_set():
    cloud = make_cloud()
    with pytest.raises(ConfigurationError) as exc:
        DatasetBuilder().build([], cloud)
    assert exc.value.kind is ErrorKind.EMPTY_FEATURE_SET


def test_unknown_scalar_field_aborts_build():
    cloud = make_cloud()
    features = [FeatureDescriptor.coordinate(cloud, "x"), FeatureDescriptor.scalar_field(cloud, "Roughness")]

    dataset = None
    with pytest.raises(DataError) as exc:
        dataset = DatasetBuilder().build(features, cloud)

    assert dataset is None, "No partial dataset may be returned"
    assert exc.value.kind is ErrorKind.UNKNOWN_ATTRIBUTE
    assert "Roughness" in exc.value.message, "Message must name the offending field"


def test_truncated_scalar_field():
    cloud = make_cloud(n_points=10)
    cloud.add_scalar_field("Short", np.ones(4))

    with pytest.raises(DataError) as exc:
        DatasetBuilder().build([FeatureDescriptor.scalar_field(cloud, "Short")], cloud)
    assert exc.value.kind is ErrorKind.TRUNCATED_ATTRIBUTE


def test_color_feature_without_colors():
    cloud = make_cloud(with_colors=False)
    with pytest.raises(DataError) as exc:
        DatasetBuilder().build([FeatureDescriptor.color(cloud, "red")], cloud)
    assert exc.value.kind is ErrorKind.MISSING_CAPABILITY


def test_missing_ground_truth():
    cloud = PointCloud(np.zeros((5, 3)), scalar_fields={"Intensity": np.ones(5)})
    with pytest.raises(DataError) as exc:
        DatasetBuilder().build([FeatureDescriptor.coordinate(cloud, "x")], cloud, with_labels=True)
    assert exc.value.kind is ErrorKind.MISSING_GROUND_TRUTH


def test_truncated_ground_truth():
    cloud = PointCloud(np.zeros((5, 3)), scalar_fields={"Classification": np.ones(3)})
    with pytest.raises(DataError) as exc:
        DatasetBuilder().build([FeatureDescriptor.coordinate(cloud, "x")], cloud, with_labels=True)
    assert exc.value.kind is ErrorKind.TRUNCATED_GROUND_TRUTH
    assert "expected 5" in exc.value.message and "found 3" in exc.value.message


def test_non_finite_ground_truth():
    cloud = PointCloud(np.zeros((3, 3)), scalar_fields={"Classification": [1.0, np.nan, 2.0]})
    with pytest.raises(DataError) as exc:
        DatasetBuilder().build([FeatureDescriptor.coordinate(cloud, "x")], cloud, with_labels=True)
    assert exc.value.kind is ErrorKind.INVALID_GROUND_TRUTH


def test_ground_truth_outside_int32_range():
    """Codes that don't fit int32 are rejected instead of wrapping"""
    cloud = PointCloud(np.zeros((3, 3)), scalar_fields={"Classification": [3.0e9, 1.0, -3.0e9]})
    with pytest.raises(DataError) as exc:
        DatasetBuilder().build([FeatureDescriptor.coordinate(cloud, "x")], cloud, with_labels=True)
    assert exc.value.kind is ErrorKind.INVALID_GROUND_TRUTH
    assert "2 value(s)" in exc.value.message


def test_feature_from_other_cloud():
    cloud_a = make_cloud(name="a")
    cloud_b = make_cloud(name="b")
    features = [FeatureDescriptor.coordinate(cloud_a, "x"), FeatureDescriptor.coordinate(cloud_b, "y")]

    with pytest.raises(DataError) as exc:
        DatasetBuilder().build(features, cloud_a)
    assert exc.value.kind is ErrorKind.CLOUD_MISMATCH
    assert "cloud=b" in exc.value.message


def test_subset_from_other_cloud():
    cloud_a = make_cloud(name="a")
    cloud_b = make_cloud(name="b")

    with pytest.raises(DataError) as exc:
        DatasetBuilder().build([FeatureDescriptor.coordinate(cloud_a, "x")], cloud_a, cloud_b.subset([0, 1]))
    assert exc.value.kind is ErrorKind.SUBSET_MISMATCH


def test_descriptor_validation():
    cloud = make_cloud()

    with pytest.raises(ConfigurationError):
        FeatureDescriptor(cloud, SourceKind.SCALAR_FIELD)
    with pytest.raises(ConfigurationError):
        FeatureDescriptor.coordinate(cloud, "w")

    feature = FeatureDescriptor.scalar_field(cloud, "Intensity", FeatureType.NEIGHBORHOOD, scale=2.5)
    assert str(feature) == "Intensity [neighborhood, scale=2.5, cloud=synthetic]"


def test_subset_validation():
    cloud = make_cloud(n_points=10)

    with pytest.raises(ConfigurationError) as exc:
        cloud.subset([0, 10])
    assert exc.value.kind is ErrorKind.INVALID_SUBSET

    with pytest.raises(ConfigurationError):
        cloud.subset([0.5, 1.5])

    with pytest.raises(ConfigurationError) as exc:
        cloud.get_subset("test")
    assert exc.value.kind is ErrorKind.MISSING_SUBSET

    named = cloud.add_subset("test", [1, 2, 3])
    assert cloud.get_subset("test") is named
    assert named.get_point_global_index(2) == 3


def test_row_mapping():
    cloud = make_cloud(n_points=6)
    assert list(row_point_indices(cloud)) == [0, 1, 2, 3, 4, 5]
    assert list(row_point_indices(cloud, cloud.subset([5, 1]))) == [5, 1]
    assert len(row_point_indices(cloud, cloud.subset([]))) == 0
