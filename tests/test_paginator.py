"""Tests for sorting, grouping and pagination."""

from decimal import Decimal

from cashbook.models.ledger import TransactionType
from cashbook.models.report import SortOrder, Totals
from cashbook.reports.paginator import group_by_day, paginate, sort_transactions

from conftest import make_transaction


class TestSort:
    """Tests for sort_transactions."""

    def test_newest_first(self):
        old = make_transaction(date="2024-01-01")
        new = make_transaction(date="2024-03-01")
        assert sort_transactions([old, new]) == [new, old]

    def test_oldest_first(self):
        old = make_transaction(date="2024-01-01")
        new = make_transaction(date="2024-03-01")
        assert sort_transactions([new, old], SortOrder.OLDEST) == [old, new]

    def test_by_amount(self):
        small = make_transaction("5")
        big = make_transaction("500")
        assert sort_transactions([small, big], SortOrder.HIGHEST) == [big, small]
        assert sort_transactions([big, small], "lowest") == [small, big]

    def test_stable_for_same_day(self):
        a = make_transaction(description="a")
        b = make_transaction(description="b")
        c = make_transaction(description="c")
        assert sort_transactions([a, b, c]) == [a, b, c]

    def test_undated_sorts_as_oldest(self):
        undated = make_transaction(date=None)
        dated = make_transaction(date="2000-01-01")
        assert sort_transactions([undated, dated]) == [dated, undated]


class TestPaginate:
    """Tests for paginate."""

    def items(self, count):
        return [make_transaction(str(i + 1)) for i in range(count)]

    def test_page_count(self):
        page = paginate(self.items(25), page_size=10, page=1)
        assert page.total_pages == 3
        assert page.total_count == 25
        assert len(page.items) == 10

    def test_last_page_partial(self):
        page = paginate(self.items(25), page_size=10, page=3)
        assert [t.amount for t in page.items] == [Decimal(str(i)) for i in range(21, 26)]

    def test_page_is_clamped(self):
        assert paginate(self.items(25), page=9).page == 3
        assert paginate(self.items(25), page=0).page == 1

    def test_empty_list(self):
        page = paginate([], page=4)
        assert page.total_pages == 0
        assert page.page == 1
        assert page.items == []

    def test_summary_covers_whole_list(self):
        page = paginate(self.items(12), page_size=5, page=1)
        assert page.summary.expense == Decimal(sum(range(1, 13)))

    def test_explicit_summary(self):
        totals = Totals(income=Decimal("1"))
        assert paginate(self.items(2), summary=totals).summary == totals


class TestGroupByDay:
    """Tests for day grouping on a page."""

    def test_groups_and_net(self):
        items = [
            make_transaction("100", TransactionType.INCOME, date="2024-03-02"),
            make_transaction("30", date="2024-03-02"),
            make_transaction("5", date="2024-03-01"),
        ]
        groups = group_by_day(items)
        assert [g.day for g in groups] == ["2024-03-02", "2024-03-01"]
        assert groups[0].net == Decimal("70")
        assert groups[1].net == Decimal("-5")

    def test_day_split_across_pages(self):
        items = [make_transaction("10", date="2024-03-02") for _ in range(3)]
        first = paginate(items, page_size=2, page=1)
        second = paginate(items, page_size=2, page=2)
        assert first.groups[0].net == Decimal("-20")
        assert second.groups[0].net == Decimal("-10")


class TestPagesCoverList:
    """Walking every page yields the whole sorted list exactly once."""

    def test_concatenated_pages(self):
        items = [
            make_transaction(str(i), date=f"2024-03-{(i * 7) % 28 + 1:02d}")
            for i in range(1, 12)
        ] + [make_transaction("3", date=None)]
        ordered = sort_transactions(items)

        first = paginate(ordered, page_size=5, page=1)
        walked = []
        for page in range(1, first.total_pages + 1):
            walked.extend(paginate(ordered, page_size=5, page=page).items)

        assert first.total_pages == 3
        assert walked == ordered

    def test_exact_multiple_of_page_size(self):
        ordered = sort_transactions([make_transaction(str(i)) for i in range(6)],
                                    SortOrder.HIGHEST)
        pages = [paginate(ordered, page_size=3, page=p).items for p in (1, 2)]
        assert pages[0] + pages[1] == ordered
        assert paginate(ordered, page_size=3).total_pages == 2
