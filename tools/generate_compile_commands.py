#!/usr/bin/env python3
"""Write compile_commands.json for the node embedding demo.

Reads the Makefile produced by tools/mkmf.py, expands the make variables
it carries and emits one compilation database entry per source file.
"""
import os
import re
import sys
import json
import shlex
import argparse

SOURCES = [
    ('node.cc', 'c++', ['DEFS_Release', 'INCS_Release', 'CFLAGS_Release', 'CFLAGS_CC_Release']),
    ('node_main.c', 'cc', ['CFLAGS_Release']),
]

VAR_REF = re.compile(r'\$\(([A-Za-z0-9_.]+)\)')


def join_continuations(text):
    return re.sub(r'\\\n', ' ', text)


def read_var(name, text):
    m = re.search(r'^\s*' + re.escape(name) + r'\s*[:?]?=[ \t]*(.*)$', join_continuations(text), flags=re.M)
    if not m:
        return None
    return ' '.join(m.group(1).split())


def expand(value, variables, depth=0):
    # stop on self-referential definitions
    if depth > 16:
        return value

    def sub(m):
        name = m.group(1)
        if name not in variables:
            return m.group(0)
        return expand(variables[name], variables, depth + 1)

    return VAR_REF.sub(sub, value)


def compile_entries(mf, directory):
    names = ['srcdir', 'builddir', 'obj']
    for _, _, flags in SOURCES:
        names += flags
    variables = {}
    for name in names:
        val = read_var(name, mf)
        if val is not None:
            variables[name] = val

    entries = []
    for src, compiler, flags in SOURCES:
        args = [compiler]
        for flag in flags:
            args += shlex.split(expand(variables.get(flag, ''), variables))
        args += ['-c', src]
        entries.append({
            'directory': directory,
            'command': ' '.join(shlex.quote(a) for a in args),
            'file': os.path.join(directory, src)
        })
    return entries


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument('--makefile', default='Makefile', help='Makefile generated by tools/mkmf.py')
    ap.add_argument('--output', default='compile_commands.json', help='Path of the compilation database')
    args = ap.parse_args(argv)

    if not os.path.exists(args.makefile):
        print('%s not found; run tools/mkmf.py first' % args.makefile, file=sys.stderr)
        return 2

    with open(args.makefile, 'r') as f:
        mf = f.read()

    directory = os.path.abspath(os.path.dirname(args.makefile))
    entries = compile_entries(mf, directory)

    with open(args.output, 'w') as f:
        json.dump(entries, f, indent=2)
    print('Wrote', args.output)
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
