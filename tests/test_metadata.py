"""
Tests for the metadata index.
"""

from survey_connector.metadata import (
    GROUP,
    REPEAT,
    FieldDescriptor,
    MetadataIndex,
    coerce_descriptors,
    split_path,
)


def test_split_path_drops_leading_slash():
    assert split_path('/household/info/member_age') == ('household', 'info', 'member_age')


def test_descriptor_from_dict(form_fields):
    descriptor = FieldDescriptor.from_dict(form_fields[3])

    assert descriptor.path == '/photo'
    assert descriptor.type == 'binary'
    assert descriptor.binary is True
    assert descriptor.segments == ('photo',)


def test_index_records_structures_and_repeats(form_fields):
    index = MetadataIndex.build(form_fields)

    assert index.kind(('details',)) == GROUP
    assert index.kind(('household',)) == REPEAT
    assert index.kind(('household', 'info')) == GROUP
    assert index.kind(('household', 'pets')) == REPEAT
    assert index.kind(('children', 'child')) == REPEAT
    assert len(index) == 7


def test_index_never_records_leaves_or_instance_id(form_fields):
    index = MetadataIndex.build(form_fields)
    structural = {tuple(f['path'].strip('/').split('/')) for f in form_fields
                  if f['type'] in ('structure', 'repeat')}

    for field in form_fields:
        segments = tuple(field['path'].strip('/').split('/'))
        if segments not in structural:
            assert segments not in index
    assert ('meta', 'instanceID') not in index


def test_instance_id_is_skipped_even_if_structural():
    index = MetadataIndex.build([{'path': '/meta/instanceID', 'name': 'instanceID', 'type': 'structure'}])
    assert len(index) == 0


def test_same_name_at_different_depths_keeps_both_kinds():
    index = MetadataIndex.build([
        {'path': '/block', 'name': 'block', 'type': 'structure'},
        {'path': '/visits', 'name': 'visits', 'type': 'repeat'},
        {'path': '/visits/block', 'name': 'block', 'type': 'repeat'},
    ])

    assert index.is_group(('block',))
    assert index.is_repeat(('visits', 'block'))


def test_each_build_starts_empty(form_fields):
    first = MetadataIndex.build(form_fields)
    second = MetadataIndex.build([{'path': '/other', 'name': 'other', 'type': 'repeat'}])

    assert len(second) == 1
    assert ('household',) not in second
    assert ('household',) in first


def test_repeats_in_document_order(form_fields):
    index = MetadataIndex.build(form_fields)
    assert index.repeats() == [('household',), ('household', 'pets'), ('children', 'child')]


def test_coerce_descriptors_skips_garbage(form_fields):
    descriptors = coerce_descriptors([form_fields[0], FieldDescriptor('/x', 'x', 'int'), 42])
    assert [d.name for d in descriptors] == ['name', 'x']
