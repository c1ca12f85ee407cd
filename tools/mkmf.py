#!/usr/bin/env python3
"""Build a standalone Makefile for the node embedding demo.

The node build is driven by gyp-generated makefiles that are hard to reuse
outside the tree. This pulls the flag blocks we need out of
`out/node_lib.target.mk` and `out/node.target.mk` and writes a small
`Makefile` in the current directory that builds `node_main` from
node.cc / node_main.c against the already-built node library.

Usage: tools/mkmf.py [srcdir]

srcdir defaults to ~/git/node.
"""
import os
import re
import sys
import argparse

OUTPUT = 'Makefile'

LIB_BLOCKS = ['DEFS_Release', 'INCS_Release', 'CFLAGS_Release', 'CFLAGS_CC_Release']
NODE_BLOCKS = ['LDFLAGS_Release', 'LIBS']

TRAILER = (
    'node_main: node_main.o node.o\n'
    '\tc++ $(LDFLAGS_Release) -o $@ $+ $(LIBS) $(LD_INPUTS)\n'
    '\n'
    'node.o: node.cc node_embed.h\n'
    '\tc++ $(DEFS_Release) $(INCS_Release) $(CFLAGS_Release) \\\n'
    '\t$(CFLAGS_CC_Release) -c $< -o $@\n'
    '\n'
    'node_main.o: node_main.c node_embed.h\n'
    '\tcc $(CFLAGS_Release) -c $< -o $@\n'
    '\n'
    'test: node_main\n'
    '\ttest "$$(./node_main)" = "2"\n'
    '\n'
    'clean:\n'
    '\trm -f node_main.o node.o node_main\n'
)


class BlockNotFound(ValueError):
    def __init__(self, name, path=None):
        self.name = name
        self.path = path
        where = ' in %s' % path if path else ''
        super().__init__('%s block not found%s' % (name, where))


def default_srcdir():
    return os.path.join(os.path.expanduser('~'), 'git', 'node')


def extract_block(name, text, path=None):
    """Return `NAME := ...` through the first blank line that follows it."""
    m = re.search(r'\b' + re.escape(name) + r'\s*:=.*?\n\n', text, flags=re.S)
    if not m:
        raise BlockNotFound(name, path)
    return m.group(0)


def extract_line(name, text, path=None):
    """Return `NAME := ...` through the end of its line only."""
    m = re.search(r'\b' + re.escape(name) + r'\s*:=.*?\n', text)
    if not m:
        raise BlockNotFound(name, path)
    return m.group(0)


def header(srcdir):
    return ('srcdir := %s\n' % srcdir +
            'builddir := $(srcdir)/out/Release\n'
            'obj := $(builddir)/obj\n'
            '\n')


def trailer():
    return TRAILER


def read_text(path):
    with open(path, 'r') as f:
        return f.read()


def assemble(srcdir):
    """Return the full Makefile text for `srcdir`; nothing is written."""
    out = header(srcdir)

    lib_mk = os.path.join(srcdir, 'out', 'node_lib.target.mk')
    text = read_text(lib_mk)
    for name in LIB_BLOCKS:
        out += extract_block(name, text, lib_mk)

    node_mk = os.path.join(srcdir, 'out', 'node.target.mk')
    text = read_text(node_mk)
    for name in NODE_BLOCKS:
        out += extract_block(name, text, node_mk)
    # LD_INPUTS is a one-line target-specific assignment, not a blank-line block
    out += extract_line('LD_INPUTS', text, node_mk) + '\n'

    out += trailer()
    return out


def write_makefile(text, path=OUTPUT):
    with open(path, 'w') as f:
        f.write(text)
    return path


def main(argv=None):
    ap = argparse.ArgumentParser(description='Generate a standalone Makefile for the node embedding demo')
    ap.add_argument('srcdir', nargs='?', help='node source checkout (default: ~/git/node)')
    args = ap.parse_args(argv)

    srcdir = args.srcdir or default_srcdir()
    try:
        text = assemble(srcdir)
    except (OSError, BlockNotFound) as e:
        print('mkmf: %s' % e, file=sys.stderr)
        return 2

    print('Wrote', write_makefile(text))
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
