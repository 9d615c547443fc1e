import blob_codec


def test_encode_is_two_lowercase_hex_digits_per_byte():
    assert blob_codec.encode(b'\x01\x02') == '0102'
    assert blob_codec.encode(b'\xff\x00\xab') == 'ff00ab'
    assert len(blob_codec.encode(bytes(range(256)))) == 512


def test_every_byte_value_round_trips():
    data = bytes(range(256)) + bytes(reversed(range(256)))
    assert blob_codec.decode(blob_codec.encode(data)) == data


def test_empty_input_gives_empty_output():
    assert blob_codec.encode(b'') == ''
    assert blob_codec.decode('') == b''


def test_trailing_odd_character_is_dropped():
    assert blob_codec.decode('0102f') == b'\x01\x02'
    assert blob_codec.decode('f') == b''


def test_upper_case_digits_are_accepted():
    assert blob_codec.decode('ABcd') == b'\xab\xcd'


def test_invalid_characters_decode_as_zero_nibbles():
    assert blob_codec.decode('zz01') == b'\x00\x01'
    assert blob_codec.decode('1z') == b'\x10'


def test_is_valid():
    assert blob_codec.is_valid('')
    assert blob_codec.is_valid('00ffAB')
    assert not blob_codec.is_valid('0')
    assert not blob_codec.is_valid('0g')
    assert not blob_codec.is_valid(None)
