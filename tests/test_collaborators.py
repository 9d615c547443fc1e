import numpy as np
import pytest

from errors import ImageNotFoundError
from history import HistoryStore
from shortcuts import ShortcutRegistry, style_accel_label
from state import ControlLog, DevelopState
from storage import Storage, batched, placeholders
from tags import TagRegistry
from thumbnails import THUMB_WIDTH, ThumbnailCache, encode_thumbnail


# ----------------------------------------------------------------------
# Storage
# ----------------------------------------------------------------------

def test_preferences_round_trip(storage):
    assert storage.get_preference('missing', 'fallback') == 'fallback'

    storage.set_preference('recent', {'style': 'sepia', 'count': 2})

    assert storage.get_preference('recent') == {'style': 'sepia', 'count': 2}


def test_style_preferences_defaults_and_validation(storage):
    assert storage.get_style_apply_mode() == 'append'
    assert storage.get_style_duplicate_on_apply() is False

    storage.set_style_apply_mode('replace')
    storage.set_style_duplicate_on_apply(True)

    assert storage.get_style_apply_mode() == 'replace'
    assert storage.get_style_duplicate_on_apply() is True
    with pytest.raises(ValueError):
        storage.set_style_apply_mode('merge')


def test_preferences_persist_across_instances(tmp_path):
    Storage(tmp_path / 'lib.db').set_style_apply_mode('replace')

    assert Storage(tmp_path / 'lib.db').get_style_apply_mode() == 'replace'


def test_failed_transaction_rolls_back(storage):
    with pytest.raises(RuntimeError):
        with storage.transaction() as conn:
            conn.execute("INSERT INTO styles (name) VALUES ('ghost')")
            with storage.transaction() as inner:
                assert inner is conn
            raise RuntimeError('boom')

    with storage.transaction() as conn:
        assert conn.execute("SELECT COUNT(*) FROM styles").fetchone()[0] == 0


def test_styles_dir_follows_config_dir(tmp_path):
    assert Storage(tmp_path / 'lib.db').styles_dir == tmp_path / 'styles'
    assert Storage(tmp_path / 'lib.db', tmp_path / 'cfg').styles_dir == tmp_path / 'cfg' / 'styles'


def test_batched_and_placeholders():
    assert list(batched(range(5), 2)) == [[0, 1], [2, 3], [4]]
    assert list(batched([], 2)) == []
    assert placeholders(3) == '?, ?, ?'


# ----------------------------------------------------------------------
# History
# ----------------------------------------------------------------------

def test_append_history_renumbers_after_existing_entries(history, library, make_item):
    imgid = library.add_image('IMG_0001.CR2')
    assert history.append_history(imgid, [make_item(5, 'exposure'), make_item(2, 'colorout')]) == [0, 1]

    assert history.append_history(imgid, [make_item(0, 'sharpen')]) == [2]

    entries = history.history_entries(imgid)
    assert [(e.num, e.operation) for e in entries] == [(0, 'colorout'), (1, 'exposure'), (2, 'sharpen')]
    assert all(e.imgid == imgid for e in entries)
    assert history.count(imgid) == 3


def test_copy_and_clear_history(history, library, add_image):
    source = add_image(['exposure', 'colorout'])
    target = library.add_image('IMG_0002.CR2')

    history.copy_history(source, target)
    assert [e.as_item() for e in history.history_entries(target)] == \
        [e.as_item() for e in history.history_entries(source)]

    assert history.clear_history(target) == 2
    assert history.history_entries(target) == []


def test_reload_only_for_open_image(storage, develop):
    history = HistoryStore(storage, develop)
    reloaded = []
    develop.historyReloaded.connect(lambda imgid: reloaded.append(imgid))

    history.reload_history(3)
    develop.image_id = 3
    history.reload_history(3)

    assert reloaded == [3]
    assert history.is_currently_open(3)
    assert not HistoryStore(storage).is_currently_open(3)


# ----------------------------------------------------------------------
# Editor state and log
# ----------------------------------------------------------------------

def test_module_group_is_persisted(storage):
    develop = DevelopState(storage)
    changes = []
    develop.moduleGroupChanged.connect(lambda group: changes.append(group))

    develop.module_group = 'tone'
    develop.module_group = 'no such group'

    assert changes == ['tone']
    assert DevelopState(storage).module_group == 'tone'


def test_image_opened_signal(develop):
    opened = []
    develop.imageOpened.connect(lambda imgid: opened.append(imgid))

    develop.image_id = 4
    develop.image_id = 4
    develop.image_id = None

    assert opened == [4, -1]
    assert not develop.is_current_image(4)


def test_control_log():
    log = ControlLog()
    seen = []
    log.messageLogged.connect(lambda message: seen.append(message))

    assert log.last_message is None
    log.log('one')
    log.log('two')

    assert log.messages == ['one', 'two']
    assert log.last_message == 'two'
    assert seen == ['one', 'two']


# ----------------------------------------------------------------------
# Tags, thumbnails, images
# ----------------------------------------------------------------------

def test_tags(storage):
    tags = TagRegistry(storage)
    tag_id = tags.ensure_tag('stylebox|style|sepia')

    assert tags.ensure_tag('stylebox|style|sepia') == tag_id
    assert tags.get_tag_id('unknown') is None

    tags.attach(tag_id, 7)
    tags.attach(tags.ensure_tag('stylebox|style|bw'), 7)
    assert tags.tags_for_image(7) == ['stylebox|style|bw', 'stylebox|style|sepia']

    tags.detach(tag_id, 7)
    assert tags.tags_for_image(7) == ['stylebox|style|bw']


def test_thumbnail_is_scaled_and_cached(storage):
    cache = ThumbnailCache(storage)
    img = np.full((200, 300, 3), 0.5, dtype=np.float32)

    cache.save(1, img)
    thumb = cache.load(1)

    assert thumb.shape == (66, THUMB_WIDTH, 3)
    assert abs(int(thumb[30, 50, 0]) - 127) <= 3
    cache.invalidate(1)
    assert cache.load(1) is None
    assert not cache.has(1)


def test_encode_thumbnail_tiny_image():
    blob = encode_thumbnail(np.zeros((1, 500, 3), dtype=np.uint8))
    assert blob[:2] == b'\xff\xd8'


def test_image_duplicates_and_versions(library):
    imgid = library.add_image('IMG_0001.CR2')
    first = library.duplicate(imgid)
    second = library.duplicate(first)

    assert library.get_version(imgid) == 0
    assert library.get_version(first) == 1
    assert library.get_version(second) == 2
    assert library.get_filename(second) == 'IMG_0001.CR2'
    with pytest.raises(ImageNotFoundError):
        library.duplicate(999)


def test_selection(library):
    ids = [library.add_image(f'IMG_{n}.CR2') for n in range(3)]

    library.select([ids[2], ids[0], ids[2]])
    assert library.selected_ids() == [ids[0], ids[2]]

    library.deselect([ids[0]])
    assert library.selected_ids() == [ids[2]]

    library.clear_selection()
    assert library.selected_ids() == []


# ----------------------------------------------------------------------
# Shortcuts
# ----------------------------------------------------------------------

def test_shortcut_registry():
    registry = ShortcutRegistry()
    events = []
    registry.shortcutRegistered.connect(lambda label: events.append(('+', label)))
    registry.shortcutRemoved.connect(lambda label: events.append(('-', label)))
    applied = []
    label = style_accel_label('sepia')

    registry.register(label, 'sepia', key='Ctrl+1')
    registry.bind(label, lambda name: applied.append(name))

    assert label == 'styles/Apply sepia'
    assert registry.key_for(label) == 'Ctrl+1'
    assert registry.activate(label) is True
    assert applied == ['sepia']

    registry.deregister(label)
    registry.deregister(label)

    assert registry.activate(label) is False
    assert not registry.is_registered(label)
    assert events == [('+', label), ('-', label)]
    with pytest.raises(KeyError):
        registry.bind(label, print)


def test_append_history_after_gap_starts_above_highest_num(storage, history, library, make_item):
    imgid = library.add_image('IMG_0001.CR2')
    history.append_history(imgid, [make_item(0, 'exposure'), make_item(1, 'colorout'), make_item(2, 'sharpen')])
    with storage.transaction() as conn:
        conn.execute("DELETE FROM history WHERE imgid = ? AND num = 1", (imgid,))

    assert history.next_num(imgid) == 3
    assert history.append_history(imgid, [make_item(0, 'grain')]) == [3]


def test_remove_image_drops_its_rows(storage, library, history, add_image):
    imgid = add_image(['exposure'])
    keep = add_image(['sharpen'], filename='IMG_0002.CR2')
    tags = TagRegistry(storage)
    tags.attach(tags.ensure_tag('stylebox|style|sepia'), imgid)
    ThumbnailCache(storage).save(imgid, np.zeros((10, 10, 3), dtype=np.uint8))
    library.select([imgid, keep])

    assert library.remove(imgid) is True

    assert not library.exists(imgid)
    assert history.history_entries(imgid) == []
    assert tags.tags_for_image(imgid) == []
    assert not ThumbnailCache(storage).has(imgid)
    assert library.selected_ids() == [keep]
    assert [e.operation for e in history.history_entries(keep)] == ['sharpen']
    assert library.remove(imgid) is False
