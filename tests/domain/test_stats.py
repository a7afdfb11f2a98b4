"""Tests for the ShopStats aggregate counters."""

from shop.stats.stats import STATS_ID, ShopStats


class TestShopStats:
    def test_empty(self):
        stats = ShopStats.empty()
        assert stats.id == STATS_ID
        assert stats.total_users == 0
        assert stats.total_orders == 0
        assert stats.total_revenue == 0.0
        assert stats.sales_by_product() == {}

    def test_record_customer(self):
        stats = ShopStats.empty()
        stats.record_customer()
        stats.record_customer()
        assert stats.total_users == 2

    def test_record_paid_order(self):
        stats = ShopStats.empty()
        stats.record_paid_order(59.98, {"prod_003": 2})
        stats.record_paid_order(329.98, {"prod_003": 1, "prod_004": 1})

        assert stats.total_orders == 2
        assert stats.total_revenue == 389.96
        assert stats.sold("prod_003") == 3
        assert stats.sold("prod_004") == 1
        assert stats.sold("prod_001") == 0

    def test_revenue_is_kept_to_cents(self):
        stats = ShopStats.empty()
        for _ in range(3):
            stats.record_paid_order(0.1, {"prod_003": 1})
        assert stats.total_revenue == 0.3
