# A line calculator: one operation per line, applied to a running value.
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'src'))
import argparse
import fileinput
import logging
import linecalc


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument('files', nargs='*', action='store', help='Files of command lines; prompt for lines if none.')
    ap.add_argument('--initial', type=float, default=0.0, action='store')
    ap.add_argument('-v', '--verbose', action='store_true')
    args = ap.parse_args()

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s: %(message)s',
        )
    log = logging.getLogger('lc')

    current = args.initial
    if args.files:
        for line in fileinput.input(args.files):
            line = line.rstrip('\n')
            log.debug('%s:%d: %r', fileinput.filename(), fileinput.filelineno(), line)
            current = linecalc.evaluate(current, line)
            print(current)
        return

    while 1:
        try:
            line = input('%g> ' % (current,))
        except EOFError:
            break
        if line == '':
            break
        current = linecalc.evaluate(current, line)
        print(current)


if __name__=='__main__':
    main()
