import pytest

from errors import StyleExistsError
from models import StyleItem


def test_create_header_and_lookup(store):
    style_id = store.create_header('sepia', 'warm brown toning')

    assert store.exists('sepia') is True
    assert store.get_id('sepia') == style_id
    assert store.get_description('sepia') == 'warm brown toning'
    assert store.exists('missing') is False
    assert store.get_id('missing') is None
    assert store.get_description('missing') is None


def test_duplicate_header_is_refused_and_original_kept(store):
    style_id = store.create_header('sepia', 'original')

    with pytest.raises(StyleExistsError):
        store.create_header('sepia', 'replacement')

    assert store.get_id('sepia') == style_id
    assert store.get_description('sepia') == 'original'
    assert len(store.list('sepia')) == 1


def test_legacy_duplicates_resolve_to_newest_row(store, storage):
    with storage.transaction() as conn:
        conn.execute("INSERT INTO styles (name, description) VALUES ('bw', 'old')")
        newest = conn.execute("INSERT INTO styles (name, description) VALUES ('bw', 'new')").lastrowid

    assert store.get_id('bw') == newest
    assert store.get_description('bw') == 'new'


def test_list_filters_name_or_description_sorted_by_name(store):
    store.create_header('sepia', 'warm brown')
    store.create_header('bw', 'black and white')
    store.create_header('cross', 'cross process')

    assert [s.name for s in store.list()] == ['bw', 'cross', 'sepia']
    assert [s.name for s in store.list('process')] == ['cross']
    assert [s.name for s in store.list('white')] == ['bw']
    assert store.list('nothing like this') == []


def test_list_filter_wildcards_are_literal(store):
    store.create_header('half', 'fade 50% strength')
    store.create_header('full', 'no fade')
    store.create_header('under_score', '')

    assert [s.name for s in store.list('50%')] == ['half']
    assert [s.name for s in store.list('%')] == ['half']
    assert [s.name for s in store.list('_')] == ['under_score']


def test_list_items_with_params_highest_num_first(store, add_style):
    add_style('sepia', ['exposure', 'colorout', 'sharpen'])

    items = store.list_items('sepia', include_params=True)

    assert [i.num for i in items] == [2, 1, 0]
    assert [i.operation for i in items] == ['sharpen', 'colorout', 'exposure']
    assert items[0].op_params == bytes([2, 0xA0, 0xFF])
    assert items[0].blendop_params == bytes([0x00, 2, 0x7F])
    assert items[0].blendop_version == 7
    assert items[0].module == 3


def test_list_items_for_display(store, make_item):
    style_id = store.create_header('look')
    store.save_item(style_id, make_item(0, 'colorout'))
    store.save_item(style_id, make_item(1, 'mystery', enabled=False))

    items = store.list_items('look', include_params=False)

    assert [i.operation for i in items] == ['mystery (off)', 'output color profile (on)']
    assert all(i.op_params is None and i.blendop_params is None for i in items)
    assert all(i.is_display_only for i in items)


def test_display_items_cannot_be_saved(store):
    style_id = store.create_header('look')
    item = StyleItem(num=0, operation='exposure (on)', op_params=None, blendop_params=None)

    with pytest.raises(ValueError):
        store.save_item(style_id, item)


def test_list_items_of_unknown_style_is_empty(store):
    assert store.list_items('missing') == []
    assert store.item_list_as_string('missing') is None


def test_save_item_decodes_hex_text(store):
    style_id = store.create_header('imported')
    store.save_item(style_id, StyleItem(num=4, operation='colorout', op_params='0102',
                                        blendop_params='ff00', multi_name='second'))

    item = store.list_items('imported')[0]

    assert item.op_params == b'\x01\x02'
    assert item.blendop_params == b'\xff\x00'
    assert item.multi_name == 'second'
    assert item.num == 4


def test_save_item_keeps_empty_blobs(store):
    style_id = store.create_header('empty')
    store.save_item(style_id, StyleItem(num=0, operation='gamma', op_params=b'', blendop_params=''))

    item = store.list_items('empty')[0]

    assert item.op_params == b''
    assert item.blendop_params == b''


def test_item_list_as_string(store, add_style):
    add_style('sepia', ['exposure', 'colorout'])

    assert store.item_list_as_string('sepia') == 'output color profile (on)\nexposure (on)'


def test_replace_items_keeps_only_filtered_nums(store, add_style):
    style_id = add_style('sepia', ['exposure', 'colorout', 'sharpen'])

    deleted = store.replace_items(style_id, {0})

    assert deleted == 2
    assert [i.num for i in store.list_items('sepia')] == [0]


def test_replace_items_without_filter_keeps_everything(store, add_style):
    style_id = add_style('sepia')

    assert store.replace_items(style_id, None) == 0
    assert len(store.list_items('sepia')) == 3


def test_replace_items_with_empty_filter_removes_all(store, add_style):
    style_id = add_style('sepia')

    store.replace_items(style_id, [])

    assert store.list_items('sepia') == []


def fill_style(store, make_item, name, count):
    with store.storage.transaction():
        style_id = store.create_header(name)
        for num in range(count):
            store.save_item(style_id, make_item(num))
    return style_id


def test_replace_items_handles_large_filters(store, make_item):
    style_id = fill_style(store, make_item, 'big', 1500)

    store.replace_items(style_id, range(0, 1500, 2))

    nums = store.item_nums(style_id)
    assert len(nums) == 750
    assert all(num % 2 == 0 for num in nums)


def test_copy_items_with_and_without_filter(store, add_style):
    source = add_style('sepia', ['exposure', 'colorout', 'sharpen'])
    partial = store.create_header('partial')
    full = store.create_header('full')

    assert store.copy_items(partial, source, [0, 2]) == 2
    assert store.copy_items(full, source) == 3

    assert [i.operation for i in store.list_items('partial')] == ['sharpen', 'exposure']
    assert store.list_items('full') == store.list_items('sepia')


def test_delete_removes_header_and_items(store, storage, add_style):
    style_id = add_style('sepia')

    assert store.delete('sepia') is True

    assert store.get_id('sepia') is None
    assert store.list_items('sepia') == []
    with storage.transaction() as conn:
        count = conn.execute("SELECT COUNT(*) FROM style_items WHERE styleid = ?", (style_id,)).fetchone()[0]
    assert count == 0


def test_delete_unknown_style_is_a_no_op(store):
    assert store.delete('missing') is False


def test_update_header(store):
    style_id = store.create_header('old', 'first')

    store.update_header(style_id, 'new', 'second')

    assert store.get_id('old') is None
    assert store.get_id('new') == style_id
    assert store.get_description('new') == 'second'


def test_copy_items_handles_large_filters(store, make_item):
    source = fill_style(store, make_item, 'big', 1500)
    target = store.create_header('odd')

    copied = store.copy_items(target, source, range(1, 1500, 2))

    assert copied == 750
    nums = store.item_nums(target)
    assert nums == list(range(1, 1500, 2))
    assert store.list_items('odd')[0].op_params == bytes([1499 & 0xFF, 0xA0, 0xFF])


def test_count_items(store, add_style):
    add_style('sepia', ['exposure', 'colorout'])

    assert store.count_items('sepia') == 2
    assert store.count_items('missing') == 0
