import pytest

from depotline.allocation import allocate, sort_by_proximity
from depotline.domain import Warehouse
from depotline.geo import distance_km

WEIGHT = 0.365
RATE = 0.01


def warehouse(id, name, lat, lon, stock):
    return Warehouse(id=id, name=name, latitude=lat, longitude=lon, stock=stock)


class TestSortByProximity:
    def test_nearest_first(self):
        far = warehouse(1, "Far", 40.0, 40.0, 5)
        near = warehouse(2, "Near", 10.0, 20.0, 5)
        ordered = sort_by_proximity([far, near], 10.0, 20.0)
        assert [item.name for item, _ in ordered] == ["Near", "Far"]
        assert ordered[0][1] == 0

    def test_ties_keep_input_order(self):
        first = warehouse(1, "First", 5.0, 5.0, 1)
        second = warehouse(2, "Second", 5.0, 5.0, 1)
        ordered = sort_by_proximity([first, second], 0.0, 0.0)
        assert [item.name for item, _ in ordered] == ["First", "Second"]


class TestAllocate:
    def test_empty_warehouses(self):
        result = allocate(1, 0, 0, [], WEIGHT, RATE)
        assert result.is_stock_sufficient is False
        assert result.allocation == []
        assert result.total_shipping_cost == 0

    def test_insufficient_total_stock(self):
        result = allocate(5, 0, 0, [warehouse(1, "Only", 0, 0, 1)], WEIGHT, RATE)
        assert result.is_stock_sufficient is False
        assert result.allocation == []
        assert result.total_shipping_cost == 0

    def test_zero_distance_is_free(self):
        result = allocate(2, 10, 20, [warehouse(1, "A", 10, 20, 5), warehouse(2, "B", 10, 20, 5)], WEIGHT, RATE)
        assert result.is_stock_sufficient is True
        assert [(entry.warehouse, entry.quantity) for entry in result.allocation] == [("A", 2)]
        assert result.total_shipping_cost == 0

    def test_splits_nearest_first(self):
        near = warehouse(1, "Near", 10.0, 20.0, 1)
        far = warehouse(2, "Far", 10.1, 20.1, 10)
        result = allocate(2, 10.0, 20.0, [far, near], WEIGHT, RATE)

        assert [(entry.warehouse, entry.quantity) for entry in result.allocation] == [("Near", 1), ("Far", 1)]
        far_distance = distance_km(10.1, 20.1, 10.0, 20.0)
        assert result.total_shipping_cost == pytest.approx(WEIGHT * far_distance * RATE)
        assert result.total_shipping_cost < 2 * WEIGHT * far_distance * RATE

    def test_skips_empty_warehouses(self):
        empty = warehouse(1, "Empty", 0.0, 0.0, 0)
        stocked = warehouse(2, "Stocked", 1.0, 1.0, 3)
        result = allocate(3, 0.0, 0.0, [empty, stocked], WEIGHT, RATE)
        assert [entry.warehouse for entry in result.allocation] == ["Stocked"]

    def test_stops_once_satisfied(self):
        sites = [warehouse(i, f"W{i}", float(i), 0.0, 4) for i in range(1, 6)]
        result = allocate(6, 0.0, 0.0, sites, WEIGHT, RATE)
        assert [(entry.warehouse, entry.quantity) for entry in result.allocation] == [("W1", 4), ("W2", 2)]

    def test_allocation_sums_to_quantity_and_respects_stock(self):
        sites = [
            warehouse(1, "Los Angeles", 33.9425, -118.408056, 355),
            warehouse(2, "New York", 40.639722, -73.778889, 578),
            warehouse(3, "Paris", 49.009722, 2.547778, 694),
            warehouse(4, "Warsaw", 52.165833, 20.967222, 245),
        ]
        stock = {site.name: site.stock for site in sites}
        for quantity in (1, 245, 600, 1500, 1872):
            result = allocate(quantity, 50.0, 10.0, sites, WEIGHT, RATE)
            assert result.is_stock_sufficient
            assert sum(entry.quantity for entry in result.allocation) == quantity
            assert all(entry.quantity <= stock[entry.warehouse] for entry in result.allocation)

    def test_shipping_cost_per_leg(self):
        site = warehouse(1, "Single", 0.0, 1.0, 10)
        result = allocate(4, 0.0, 0.0, [site], WEIGHT, RATE)
        assert result.total_shipping_cost == pytest.approx(4 * WEIGHT * distance_km(0, 1, 0, 0) * RATE)
