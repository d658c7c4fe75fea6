"""
Tests for repositories/ - query building, reads, writes and transactions
"""
import threading

import pytest

from database import RepositoryError, Transaction, TransactionError, current_transaction
from database import TAG_STATUS_INVALID
from repositories import (
    CompositeFilter,
    FilterOperator,
    PropertyFilter,
    Query,
    SortDirection,
    build_select,
)


@pytest.mark.unit
class TestQuery:
    """Test the Query builder."""

    def test_defaults(self):
        query = Query()
        assert query.filter is None
        assert query.sorts == []
        assert query.current_page_num == 1
        assert query.page_size is None

    def test_setters_chain(self):
        f = PropertyFilter('status', FilterOperator.EQUAL, 0)
        query = Query().set_filter(f).add_sort('id', SortDirection.DESCENDING).set_page_size(5)

        assert query.filter is f
        assert query.sorts == [('id', SortDirection.DESCENDING)]
        assert query.page_size == 5

    def test_invalid_page_num(self):
        with pytest.raises(ValueError):
            Query().set_current_page_num(0)

    def test_negative_page_size(self):
        with pytest.raises(ValueError):
            Query().set_page_size(-1)

    def test_empty_composite_filter(self):
        with pytest.raises(ValueError):
            CompositeFilter.and_()


@pytest.mark.unit
class TestBuildSelect:
    """Test SQL generation without a database."""

    def test_no_filter(self):
        sql, params = build_select(Query())
        assert sql.startswith("SELECT id, title, uri")
        assert "WHERE" not in sql
        assert "LIMIT" not in sql
        assert params == []

    def test_property_filter(self):
        query = Query().set_filter(PropertyFilter('reference_cnt', FilterOperator.GREATER_THAN, 0))
        sql, params = build_select(query)
        assert sql.endswith("WHERE reference_cnt > ?")
        assert params == [0]

    def test_nested_composite_filter(self):
        query = Query().set_filter(CompositeFilter.and_(
            PropertyFilter('icon_path', FilterOperator.NOT_EQUAL, ''),
            CompositeFilter.or_(
                PropertyFilter('status', FilterOperator.EQUAL, 0),
                PropertyFilter('reference_cnt', FilterOperator.GREATER_THAN_OR_EQUAL, 10),
            ),
        ))
        sql, params = build_select(query)
        assert "WHERE (icon_path != ? AND (status = ? OR reference_cnt >= ?))" in sql
        assert params == ['', 0, 10]

    def test_sort_and_paging(self):
        query = (Query()
                 .add_sort('reference_cnt', SortDirection.DESCENDING)
                 .add_sort('id')
                 .set_current_page_num(3)
                 .set_page_size(10))
        sql, params = build_select(query)
        assert "ORDER BY reference_cnt DESC, id ASC LIMIT ? OFFSET ?" in sql
        assert params == [10, 20]

    def test_page_count_widens_limit(self):
        sql, params = build_select(Query().set_page_size(10).set_page_count(3))
        assert params == [30, 0]

    def test_unbounded_later_page_is_empty(self):
        sql, params = build_select(Query().set_current_page_num(2))
        assert sql.endswith("LIMIT 0")

    def test_unknown_filter_column(self):
        query = Query().set_filter(PropertyFilter('1=1; DROP TABLE tags', FilterOperator.EQUAL, 1))
        with pytest.raises(RepositoryError, match="Unknown tag property"):
            build_select(query)

    def test_unknown_sort_column(self):
        with pytest.raises(RepositoryError):
            build_select(Query().add_sort('popularity'))


@pytest.mark.integration
class TestTagRepositoryReads:
    """Test TagRepository reads against a real database."""

    def test_query_filters_and_sorts(self, tag_repository, add_tag):
        add_tag('low', reference_cnt=1)
        add_tag('none', reference_cnt=0)
        add_tag('high', reference_cnt=9)

        query = (Query()
                 .set_filter(PropertyFilter('reference_cnt', FilterOperator.GREATER_THAN, 0))
                 .add_sort('reference_cnt', SortDirection.DESCENDING))
        titles = [tag.title for tag in tag_repository.query(query)]

        assert titles == ['high', 'low']

    def test_query_paging(self, tag_repository, add_tag):
        for i in range(7):
            add_tag(f'tag{i}')

        query = Query().add_sort('id').set_page_size(3).set_current_page_num(2)
        titles = [tag.title for tag in tag_repository.query(query)]

        assert titles == ['tag3', 'tag4', 'tag5']

    def test_zero_page_size_returns_nothing(self, tag_repository, add_tag):
        add_tag('alpha')
        assert tag_repository.query(Query().set_page_size(0)) == []

    def test_query_returns_tag_values(self, tag_repository, add_tag):
        added = add_tag('alpha', css='bold', description='desc', icon_path='a.png',
                        reference_cnt=4, random_double=0.5)

        fetched = tag_repository.query(Query())[0]

        assert fetched == added
        assert fetched.description_text is None

    def test_get_by_title_is_case_insensitive(self, tag_repository, add_tag):
        oldest = add_tag('Java')
        add_tag('JAVA')

        assert tag_repository.get_by_title('java').id == oldest.id
        assert tag_repository.get_by_title('kotlin') is None

    def test_count(self, tag_repository, add_tag):
        assert tag_repository.count() == 0
        add_tag('alpha')
        add_tag('beta', status=TAG_STATUS_INVALID)
        assert tag_repository.count() == 2


@pytest.mark.integration
class TestTagRepositoryWrites:
    """Test updates, with and without a transaction."""

    def test_update_writes_only_given_columns(self, tag_repository, add_tag, fetch_row):
        tag = add_tag('alpha', css='bold', reference_cnt=3)

        tag_repository.update(tag.id, uri='alpha-uri', random_double=0.75)

        row = fetch_row(tag.id)
        assert row['uri'] == 'alpha-uri'
        assert row['random_double'] == 0.75
        assert row['css'] == 'bold'
        assert row['reference_cnt'] == 3

    def test_update_keeps_columns_changed_elsewhere(self, tag_repository, add_tag,
                                                    fetch_row, db_connection):
        tag = add_tag('alpha', reference_cnt=1)
        db_connection.execute("UPDATE tags SET reference_cnt = 42 WHERE id = ?", (tag.id,))
        db_connection.commit()

        tag_repository.update(tag.id, random_double=0.25)

        assert fetch_row(tag.id)['reference_cnt'] == 42

    def test_update_missing_tag(self, tag_repository, add_tag):
        tag = add_tag('alpha')
        with pytest.raises(RepositoryError, match="no such tag"):
            tag_repository.update(tag.id + 100, uri='x')

    def test_update_unknown_column(self, tag_repository, add_tag):
        tag = add_tag('alpha')
        with pytest.raises(RepositoryError, match="Unknown tag property"):
            tag_repository.update(tag.id, description_text='transient')

    def test_update_rejects_id_and_empty_changes(self, tag_repository, add_tag):
        tag = add_tag('alpha')
        with pytest.raises(RepositoryError, match="read-only"):
            tag_repository.update(tag.id, id=99)
        with pytest.raises(RepositoryError, match="no columns"):
            tag_repository.update(tag.id)

    def test_transaction_commit(self, tag_repository, add_tag, fetch_row):
        tag = add_tag('alpha')

        transaction = tag_repository.begin_transaction()
        tag_repository.update(tag.id, css='x')
        assert fetch_row(tag.id)['css'] == ''  # not visible before commit
        transaction.commit()

        assert fetch_row(tag.id)['css'] == 'x'
        assert not transaction.is_active()
        assert current_transaction() is None

    def test_transaction_rollback(self, tag_repository, add_tag, fetch_row):
        first = add_tag('first')
        second = add_tag('second')

        transaction = tag_repository.begin_transaction()
        tag_repository.update(first.id, uri='changed')
        tag_repository.update(second.id, uri='changed')
        transaction.rollback()

        assert fetch_row(first.id)['uri'] == 'first'
        assert fetch_row(second.id)['uri'] == 'second'

    def test_context_manager_rolls_back_on_error(self, tag_repository, add_tag, fetch_row):
        tag = add_tag('alpha')

        with pytest.raises(RuntimeError):
            with Transaction():
                tag_repository.update(tag.id, uri='changed')
                raise RuntimeError("boom")

        assert fetch_row(tag.id)['uri'] == 'alpha'
        assert current_transaction() is None

    def test_context_manager_commits(self, tag_repository, add_tag, fetch_row):
        tag = add_tag('alpha')

        with Transaction():
            tag_repository.update(tag.id, uri='changed')

        assert fetch_row(tag.id)['uri'] == 'changed'

    def test_nested_transaction_rejected(self, tag_repository):
        transaction = tag_repository.begin_transaction()
        try:
            with pytest.raises(TransactionError):
                tag_repository.begin_transaction()
        finally:
            transaction.rollback()

    def test_commit_after_finish_rejected(self, tag_repository):
        transaction = tag_repository.begin_transaction()
        transaction.commit()
        with pytest.raises(TransactionError):
            transaction.commit()
        with pytest.raises(TransactionError):
            transaction.rollback()

    def test_transaction_is_per_thread(self, tag_repository):
        seen = []

        transaction = tag_repository.begin_transaction()
        worker = threading.Thread(target=lambda: seen.append(current_transaction()))
        worker.start()
        worker.join()
        transaction.rollback()

        assert seen == [None]

    def test_query_inside_transaction_sees_pending_writes(self, tag_repository, add_tag):
        tag = add_tag('alpha')

        with Transaction():
            tag_repository.update(tag.id, css='pending')
            fetched = tag_repository.query(Query())

        assert fetched[0].css == 'pending'
