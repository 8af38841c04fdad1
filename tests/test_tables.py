"""
Tests for table resolution.
"""

import pytest

from survey_connector.metadata import MetadataIndex
from survey_connector.tables import (
    classify_field_table,
    is_root_table,
    known_table_chains,
    list_tables,
    qualify_table,
    resolve_repeat_table_key,
    table_chain,
)


@pytest.fixture
def index(form_fields):
    return MetadataIndex.build(form_fields)


def test_group_inside_repeat_is_transparent():
    index = MetadataIndex.build([
        {'path': '/repeat1', 'name': 'repeat1', 'type': 'repeat'},
        {'path': '/repeat1/group1', 'name': 'group1', 'type': 'structure'},
        {'path': '/repeat1/group1/q3', 'name': 'q3', 'type': 'string'},
    ])
    assert classify_field_table(index, '/repeat1/group1/q3') == 'repeat1'


@pytest.mark.parametrize('path, chain', [
    ('/name', ''),
    ('/details/started', ''),
    ('/household/member_name', 'household'),
    ('/household/info/member_age', 'household'),
    ('/household/pets/pet_name', 'household.pets'),
    ('/children/child/child_name', 'children.child'),
])
def test_classify_field_table(index, path, chain):
    assert classify_field_table(index, path) == chain


def test_table_chain_keeps_enclosing_groups(index):
    assert table_chain(index, 'Submissions.children.child') == 'children.child'
    assert table_chain(index, 'Submissions') == ''


@pytest.mark.parametrize('table, key', [
    ('Submissions.household', '__Submissions-id'),
    ('Submissions.household.pets', '__Submissions-household-id'),
    ('Submissions.children.child', '__Submissions-id'),
])
def test_resolve_repeat_table_key(index, table, key):
    assert resolve_repeat_table_key(index, table) == key


def test_same_named_repeats_get_distinct_keys():
    index = MetadataIndex.build([
        {'path': '/member', 'name': 'member', 'type': 'repeat'},
        {'path': '/club', 'name': 'club', 'type': 'repeat'},
        {'path': '/club/member', 'name': 'member', 'type': 'repeat'},
    ])

    assert resolve_repeat_table_key(index, 'Submissions.member') == '__Submissions-id'
    assert resolve_repeat_table_key(index, 'Submissions.club.member') == '__Submissions-club-id'


def test_resolve_repeat_table_key_is_pure(index, form_fields):
    before = len(index)
    keys = {resolve_repeat_table_key(index, 'Submissions.household.pets') for _ in range(3)}

    assert keys == {'__Submissions-household-id'}
    assert len(index) == before


def test_root_table_sentinel():
    assert is_root_table('Submissions')
    assert is_root_table('')
    assert not is_root_table('Submissions.household')
    assert qualify_table('') == 'Submissions'
    assert qualify_table('household.pets') == 'Submissions.household.pets'


def test_list_tables_puts_root_first(service_document):
    service_document['value'].reverse()
    service_document['value'].append({'name': 'Metadata', 'kind': 'FunctionImport'})

    tables = list_tables(service_document)

    assert tables[0] == 'Submissions'
    assert set(tables) == {'Submissions', 'Submissions.household',
                           'Submissions.household.pets', 'Submissions.children.child'}


def test_list_tables_of_empty_document():
    assert list_tables({}) == []


def test_known_table_chains(form_tables):
    assert known_table_chains(form_tables) == ['household', 'household.pets', 'children.child']
