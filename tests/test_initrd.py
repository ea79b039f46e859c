import struct

from hivekit.initrd import Initrd


def _entry(name, content, magic=b"LORD"):
    header = struct.pack("<4sQQB", magic, 21 + len(name), len(content), len(name))
    return header + name + content


def _image():
    return (
        _entry(b"sbin/rts", b"\x7fELFdata")
        + _entry(b"etc/motd", b"welcome")
    )


def test_lookup_with_leading_slash():
    assert Initrd(_image()).lookup("/sbin/rts") == b"\x7fELFdata"


def test_lookup_without_leading_slash():
    assert Initrd(_image()).lookup("sbin/rts") == b"\x7fELFdata"


def test_lookup_second_entry():
    assert Initrd(_image()).lookup("/etc/motd") == b"welcome"


def test_lookup_missing_entry():
    assert Initrd(_image()).lookup("/etc/passwd") is None


def test_lookup_in_empty_image():
    assert Initrd(b"").lookup("/sbin/rts") is None


def test_bad_magic_stops_search():
    image = _entry(b"sbin/rts", b"x") + _entry(b"etc/motd", b"y", magic=b"NOPE")
    initrd = Initrd(image)
    assert initrd.lookup("/etc/motd") is None
    assert initrd.lookup("/sbin/rts") == b"x"


def test_shorter_path_does_not_match():
    assert Initrd(_image()).lookup("/sbin") is None


def test_stored_name_is_compared_as_prefix():
    assert Initrd(_image()).lookup("/sbin/rts.old") == b"\x7fELFdata"


def test_truncated_header_is_not_read():
    image = _image() + b"LORD\x00"
    assert Initrd(image).lookup("/missing") is None
    assert Initrd(image).lookup("/etc/motd") == b"welcome"