"""
Test configuration and fixtures.
"""

import copy

import pytest

from survey_connector.paths import FormResource

# Field descriptors as returned by /fields?odata=true for a household survey
FORM_FIELDS = [
    {'path': '/name', 'name': 'name', 'type': 'string', 'binary': False},
    {'path': '/age', 'name': 'age', 'type': 'int', 'binary': False},
    {'path': '/location', 'name': 'location', 'type': 'geopoint', 'binary': False},
    {'path': '/photo', 'name': 'photo', 'type': 'binary', 'binary': True},
    {'path': '/visit-date', 'name': 'visit-date', 'type': 'date', 'binary': False},
    {'path': '/details', 'name': 'details', 'type': 'structure', 'binary': False},
    {'path': '/details/started', 'name': 'started', 'type': 'dateTime', 'binary': False},
    {'path': '/details/area', 'name': 'area', 'type': 'geoshape', 'binary': False},
    {'path': '/household', 'name': 'household', 'type': 'repeat', 'binary': False},
    {'path': '/household/member_name', 'name': 'member_name', 'type': 'string', 'binary': False},
    {'path': '/household/info', 'name': 'info', 'type': 'structure', 'binary': False},
    {'path': '/household/info/member_age', 'name': 'member_age', 'type': 'int', 'binary': False},
    {'path': '/household/pets', 'name': 'pets', 'type': 'repeat', 'binary': False},
    {'path': '/household/pets/pet_name', 'name': 'pet_name', 'type': 'string', 'binary': False},
    {'path': '/household/pets/pet_photo', 'name': 'pet_photo', 'type': 'binary', 'binary': True},
    {'path': '/children', 'name': 'children', 'type': 'structure', 'binary': False},
    {'path': '/children/child', 'name': 'child', 'type': 'repeat', 'binary': False},
    {'path': '/children/child/child_name', 'name': 'child_name', 'type': 'string', 'binary': False},
    {'path': '/meta', 'name': 'meta', 'type': 'structure', 'binary': False},
    {'path': '/meta/instanceID', 'name': 'instanceID', 'type': 'string', 'binary': False},
]

FORM_TABLES = [
    'Submissions',
    'Submissions.household',
    'Submissions.household.pets',
    'Submissions.children.child',
]

SERVICE_DOCUMENT = {
    '@odata.context': 'https://central.example.org/v1/projects/7/forms/household_survey.svc/$metadata',
    'value': [
        {'name': table, 'kind': 'EntitySet', 'url': table}
        for table in FORM_TABLES
    ],
}

ROOT_RECORD = {
    '__id': 'uuid:abc-123',
    'name': 'Amina',
    'age': 34,
    'location': {
        'type': 'Point',
        'coordinates': [-122.33, 47.65, 0.0],
        'properties': {'accuracy': 4.5},
    },
    'photo': 'photo1.jpg',
    'visit-date': '2017-03-17',
    'details': {
        'started': '2021-03-17T12:34:56.000Z',
        'area': {'type': 'Polygon', 'coordinates': [[[1, 2], [3, 4], [1, 2]]]},
    },
    'household@odata.navigationLink': "Submissions('uuid%3Aabc-123')/household",
    'meta': {'instanceID': 'uuid:abc-123'},
    '__system': {
        'submitterName': 'enumerator1',
        'reviewState': None,
        'submissionDate': '2021-03-18T08:00:00.000Z',
    },
}

HOUSEHOLD_RECORDS = [
    {'__id': 'hh1', '__Submissions-id': 'uuid:abc-123', 'member_name': 'Juma', 'info': {'member_age': 12}},
    {'__id': 'hh2', '__Submissions-id': 'uuid:abc-123', 'member_name': 'Neema', 'info': None},
]

PET_RECORDS = [
    {'__id': 'p1', '__Submissions-household-id': 'hh1', 'pet_name': 'Rex', 'pet_photo': 'rex.jpg'},
]


@pytest.fixture
def form_fields():
    return copy.deepcopy(FORM_FIELDS)


@pytest.fixture
def form_tables():
    return list(FORM_TABLES)


@pytest.fixture
def service_document():
    return copy.deepcopy(SERVICE_DOCUMENT)


@pytest.fixture
def form_resource():
    return FormResource('https://central.example.org/v1', '7', 'household_survey')


@pytest.fixture
def root_record():
    return copy.deepcopy(ROOT_RECORD)


@pytest.fixture
def household_records():
    return copy.deepcopy(HOUSEHOLD_RECORDS)


@pytest.fixture
def pet_records():
    return copy.deepcopy(PET_RECORDS)
