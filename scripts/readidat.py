#!/usr/bin/env python3
'''
Dump the content of an IDAT file, in the spirit of readelf(1).

 $ readidat.py 200144450018_R04C01_Red.idat [preview]

where preview is the number of per-probe values to show for each field (default 5).
'''
import sys
import os
import logging

import idat
from idat.registry import is_iterable


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print('usage: %s <idat file> [preview]' % progname)
    sys.exit(1)


def dump_header(reader):
    print(f'''IDAT Header:
  Version:                           {reader.version}
  Number of fields:                  {len(reader.fields)}
  Number of probes:                  {reader.array_length}''')


def dump_directory(reader):
    print('''Directory:
  [Nr] Kind            Code   Offset''')
    for idx, definition in enumerate(reader.fields):
        print(f'''  [{idx: >2d}] {definition.kind.name:<15} {definition.code:<6d} 0x{definition.offset:08x}''')


def dump_metadata(reader):
    print('Metadata:')
    for kind, value in reader.metadata().items():
        if kind is idat.FieldKind.RUN_INFO:
            print(f'  {kind.name}:')
            for entry in value:
                print(f'    {entry.timestamp:<25} {entry.block_type:<15} {entry.block_code} {entry.code_version}')
            continue

        print(f'  {kind.name:<15} {value!r}')


def dump_values(reader, preview):
    print('Per-probe values:')
    for definition in reader.fields:
        if not is_iterable(definition.kind):
            continue
        values = reader.field_values(definition.kind)
        head = [next(values) for _ in range(min(preview, len(values)))]
        print(f'''  {definition.kind.name:<15} {' '.join(str(_) for _ in head)}{' ...' if len(values) else ''}''')


if __name__ == '__main__':
    if len(sys.argv) < 2:
        usage(sys.argv[0])

    path = sys.argv[1]
    preview = int(sys.argv[2]) if len(sys.argv) > 2 else 5

    try:
        reader = idat.open_path(path)
    except idat.IdatException as e:
        logger.error('cannot read \'%s\': %s', path, e)
        sys.exit(2)

    with reader:
        dump_header(reader)
        dump_directory(reader)
        dump_metadata(reader)
        dump_values(reader, preview)
