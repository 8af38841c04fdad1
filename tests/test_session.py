"""
Tests for session state and its file store.
"""

from survey_connector.session import JsonFileStore, SessionState


def test_properties_round_trip():
    state = SessionState(
        resource_path='https://central.example.org/v1/projects/7/forms/household_survey.svc',
        table='Submissions.household',
        row_count=250,
        page_size=100,
        skip=10,
        next_column_id=12,
    )

    properties = state.to_properties()

    assert all(isinstance(value, str) for value in properties.values())
    assert SessionState.from_properties(properties) == state


def test_unset_row_count_is_omitted():
    assert 'row_count' not in SessionState().to_properties()


def test_invalid_numbers_fall_back_to_defaults():
    state = SessionState.from_properties({'page_size': 'lots', 'skip': '', 'table': 'Submissions.household'})

    assert state.page_size == 1000
    assert state.skip == 0
    assert state.table == 'Submissions.household'


def test_file_store(tmp_path):
    store = JsonFileStore(tmp_path / 'nested' / 'session.json')

    assert store.get('table') is None
    assert store.load_state() == SessionState()

    store.save_state(SessionState(table='Submissions.household', row_count=5))
    store.set('page_size', '50')

    assert store.get('table') == 'Submissions.household'
    assert store.load_state() == SessionState(table='Submissions.household', row_count=5, page_size=50)
