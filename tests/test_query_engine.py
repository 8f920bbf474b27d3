import unittest

from dublinbikes.models import Station
from dublinbikes.query_engine import MAX_PAGE_SIZE, QueryParams, run_query


def _fleet():
    return [
        Station(number=3, name="charlemont", address="Charlemont Street", bike_stands=40, available_bikes=10, status="OPEN"),
        Station(number=1, name="Parnell Square", address="Parnell Square North", bike_stands=10, available_bikes=6, status="OPEN"),
        Station(number=4, name="Benson Street", address="Hanover Quay", bike_stands=0, available_bikes=0, status="closed"),
        Station(number=2, name="Other", address="Nowhere", bike_stands=10, available_bikes=2, status="Open"),
        Station(number=5, name="Avondale", address="Parnell Road", bike_stands=20, available_bikes=10, status="OPEN"),
    ]


class TestFilters(unittest.TestCase):
    def test_no_filters_total_is_dataset_size(self):
        result = run_query(_fleet(), QueryParams())
        self.assertEqual(result.total, 5)

    def test_status_is_case_insensitive_exact(self):
        result = run_query(_fleet(), QueryParams(status="open"))
        self.assertEqual({v.number for v in result.items}, {1, 2, 3, 5})
        self.assertEqual(run_query(_fleet(), QueryParams(status="OPE")).total, 0)

    def test_min_bikes(self):
        result = run_query(_fleet(), QueryParams(min_bikes=6))
        self.assertTrue(all(v.available_bikes >= 6 for v in result.items))
        self.assertEqual(result.total, 3)

    def test_q_matches_name_or_address(self):
        result = run_query(_fleet(), QueryParams(q="  parnell "))
        self.assertEqual({v.number for v in result.items}, {1, 5})
        for v in result.items:
            self.assertTrue("parnell" in v.name.lower() or "parnell" in v.address.lower())

    def test_blank_q_is_ignored(self):
        self.assertEqual(run_query(_fleet(), QueryParams(q="   ")).total, 5)

    def test_filters_combine(self):
        result = run_query(_fleet(), QueryParams(min_bikes=5, q="Parnell"))
        self.assertEqual(result.total, 2)


class TestProjection(unittest.TestCase):
    def test_occupancy(self):
        views = {v.number: v for v in run_query(_fleet(), QueryParams()).items}
        self.assertEqual(views[4].occupancy, 0.0)
        self.assertAlmostEqual(views[1].occupancy, 0.6)
        self.assertAlmostEqual(views[3].occupancy, 0.25)


class TestSorting(unittest.TestCase):
    def test_default_sort_is_number_ascending(self):
        numbers = [v.number for v in run_query(_fleet(), QueryParams()).items]
        self.assertEqual(numbers, [1, 2, 3, 4, 5])

    def test_unknown_sort_falls_back_to_number(self):
        numbers = [v.number for v in run_query(_fleet(), QueryParams(sort="address", dir="desc")).items]
        self.assertEqual(numbers, [1, 2, 3, 4, 5])

    def test_name_desc_is_case_insensitive(self):
        names = [v.name for v in run_query(_fleet(), QueryParams(sort="name", dir="desc")).items]
        folded = [n.casefold() for n in names]
        self.assertEqual(folded, sorted(folded, reverse=True))
        self.assertEqual(names[0], "Parnell Square")

    def test_name_asc(self):
        names = [v.name for v in run_query(_fleet(), QueryParams(sort="Name")).items]
        self.assertEqual(names, ["Avondale", "Benson Street", "charlemont", "Other", "Parnell Square"])

    def test_available_bikes_ties_keep_filtered_order(self):
        numbers = [v.number for v in run_query(_fleet(), QueryParams(sort="availableBikes", dir="desc")).items]
        # 3 and 5 both have 10 bikes; 3 comes first in the input
        self.assertEqual(numbers, [3, 5, 1, 2, 4])

    def test_occupancy_sort(self):
        numbers = [v.number for v in run_query(_fleet(), QueryParams(sort="occupancy")).items]
        self.assertEqual(numbers, [4, 2, 3, 5, 1])


class TestPaging(unittest.TestCase):
    def test_page_slice(self):
        result = run_query(_fleet(), QueryParams(page=2, page_size=2))
        self.assertEqual([v.number for v in result.items], [3, 4])
        self.assertEqual(result.total, 5)

    def test_page_beyond_last_is_empty(self):
        result = run_query(_fleet(), QueryParams(page=10, page_size=2))
        self.assertEqual(result.items, ())
        self.assertEqual(result.total, 5)

    def test_page_and_size_are_clamped(self):
        p = QueryParams(page=0, page_size=0).normalized()
        self.assertEqual((p.page, p.page_size), (1, 1))
        p = QueryParams(page=-3, page_size=10_000).normalized()
        self.assertEqual((p.page, p.page_size), (1, MAX_PAGE_SIZE))
        result = run_query(_fleet(), QueryParams(page_size=0))
        self.assertEqual(len(result.items), 1)

    def test_equivalent_params_share_cache_key(self):
        a = QueryParams(status=" OPEN ", sort="Name", dir="DESC", page=0)
        b = QueryParams(status="OPEN", sort="name", dir="desc", page=1)
        self.assertEqual(a.cache_key(), b.cache_key())
        self.assertNotEqual(a.cache_key(), QueryParams(status="OPEN").cache_key())


class TestScenarios(unittest.TestCase):
    def _two(self):
        return [
            Station(number=1, name="Parnell Square", bike_stands=10, available_bikes=6),
            Station(number=2, name="Other", bike_stands=10, available_bikes=2),
        ]

    def test_min_bikes_scenario(self):
        result = run_query(self._two(), QueryParams(min_bikes=5))
        self.assertEqual(result.total, 1)
        self.assertEqual([v.number for v in result.items], [1])

    def test_paging_scenario(self):
        result = run_query(self._two(), QueryParams(page=2, page_size=1))
        self.assertEqual(result.total, 2)
        self.assertEqual([v.number for v in result.items], [2])


if __name__ == "__main__":
    unittest.main()
