from regvm.runtime.dump import Snapshot, render

import unit_utils


def test_render_small_word():
    lines = render(Snapshot((-128, -1), False, 8))

    assert lines == unit_utils.load_file('testdata/tiny.log').splitlines()[1:]


def test_render_default_word():
    lines = render(Snapshot((-1, 42) + (0,) * 6, True, 64))

    assert len(lines) == 10
    assert lines[0] == 'Zero: true'
    assert lines[2] == 'R0:  18446744073709551615' + ' ' * 20 + '-1  0xFFFFFFFFFFFFFFFF'
    assert lines[3].endswith('42  0x000000000000002A')
    assert lines[9].startswith('R7:')


def test_render_aligns_register_names():
    lines = render(Snapshot((0,) * 11, False, 8))

    assert lines[2].startswith('R0:   ')
    assert lines[12].startswith('R10:  ')
    assert len({len(line) for line in lines[1:]}) == 1
