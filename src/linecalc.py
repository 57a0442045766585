import enum, logging, math

logger = logging.getLogger(__name__)


class Operation(enum.Enum):
    ERROR = 'error'
    SET = 'set'
    ADD = 'add'
    SUB = 'sub'
    MUL = 'mul'
    DIV = 'div'
    REM = 'rem'
    NEG = 'neg'
    POW = 'pow'
    SQRT = 'sqrt'

    @property
    def arity(self):
        return _arity[self]

_arity = {
    Operation.ERROR: 0,
    Operation.NEG: 1, Operation.SQRT: 1,
    Operation.SET: 2, Operation.ADD: 2, Operation.SUB: 2, Operation.MUL: 2,
    Operation.DIV: 2, Operation.REM: 2, Operation.POW: 2,
    }

# Literal operation codes.  A leading digit means SET and is not listed here,
# because the digit belongs to the argument.
default_operation_tokens = {
    '+': Operation.ADD,
    '-': Operation.SUB,
    '*': Operation.MUL,
    '/': Operation.DIV,
    '%': Operation.REM,
    '_': Operation.NEG,
    '^': Operation.POW,
    'SQRT': Operation.SQRT,
    }

default_max_decimal_digits = 10

_digits = '0123456789'


class CalcError(Exception): pass

class UnknownOperation(CalcError):
    def __init__(self, text):
        self.text = text

    def __str__(self):
        return 'Unknown operation %s' % (self.text,)

class ArgumentParseError(CalcError):
    def __init__(self, position, suffix):
        self.position = position
        self.suffix = suffix

    def __str__(self):
        return "Argument parsing error at %d: '%s'" % (self.position, self.suffix)

class ArgumentTrailingSuffix(CalcError):
    def __init__(self, suffix, what='Argument isn\'t fully parsed'):
        self.suffix = suffix
        self.what = what

    def __str__(self):
        return "%s, suffix left: '%s'" % (self.what, self.suffix)

class MissingArgument(CalcError):
    def __str__(self):
        return 'No argument for a binary operation'

class InvalidDomain(CalcError):
    def __init__(self, op, value):
        self.op = op
        self.value = value

    def __str__(self):
        if self.op is Operation.SQRT:
            return 'Bad argument for SQRT: %r' % (self.value,)
        names = {Operation.DIV: 'division', Operation.REM: 'remainder'}
        return 'Bad right argument for %s: %r' % (names.get(self.op, self.op.value), self.value)

class MalformedFold(CalcError):
    def __init__(self, errtext):
        self.errtext = errtext

    def __str__(self):
        return 'Malformed fold: %s' % (self.errtext,)


def log_diagnostic(error):
    """!
    @brief Default diagnostic channel: one WARNING record per failure.
    """
    logger.warning('%s', error)


def longest_first(tokens):
    return sorted(tokens, key=len, reverse=True)

_default_literals = longest_first(default_operation_tokens)


def is_fold(line):
    return line.startswith('(') and ')' in line[1:]


def decode(line, cursor=0, tokens=None, report=log_diagnostic, literals=None):
    """!
    @brief Classify the operation code starting at line[cursor].
    @param[in] line	The command line.
    @param[in] cursor	Index of the operation code.
    @param[in] tokens	A dict(str => Operation); defaults to default_operation_tokens.
    @param[in] literals	The keys of tokens, longest first; computed if not given.
    @return (Operation, cursor) with cursor just past the operation code.
    @par
    A digit yields Operation.SET without being consumed.  On failure the result is
    Operation.ERROR with cursor advanced by one, and an UnknownOperation naming the whole
    remaining text is reported.
    """
    if tokens is None:
        tokens = default_operation_tokens
        literals = _default_literals
    if literals is None:
        literals = longest_first(tokens)
    if cursor < len(line) and line[cursor] in _digits:
        return Operation.SET, cursor
    for literal in literals:
        if line.startswith(literal, cursor):
            return tokens[literal], cursor + len(literal)
    report(UnknownOperation(line[cursor:]))
    return Operation.ERROR, cursor + 1


def parse_argument(text, cursor=0, max_digits=default_max_decimal_digits, report=log_diagnostic):
    """!
    @brief Read a decimal literal: digits with at most one '.', no sign, no exponent.
    @return (value, valid, cursor).
    @par
    Scanning stops at the first unrecognized character, which makes the argument invalid,
    or after max_digits digits.  In the latter case valid is True but cursor may be short of
    len(text); checking for that is up to the caller.
    """
    value = 0.0
    fraction = 1.0
    count = 0
    integer = True
    while cursor < len(text) and count < max_digits:
        c = text[cursor]
        if c in _digits:
            if integer:
                value = value*10 + int(c)
            else:
                fraction /= 10
                value += int(c) * fraction
            count += 1
        elif c == '.' and integer:
            integer = False
        else:
            report(ArgumentParseError(cursor, text[cursor:]))
            return value, False, cursor
        cursor += 1
    return value, True, cursor


def parse_complete_argument(text, max_digits=default_max_decimal_digits, report=log_diagnostic):
    """!
    @brief Parse text as one whole argument.
    @return (value, valid); a valid literal followed by unparsed characters is invalid.
    """
    value, valid, cursor = parse_argument(text, 0, max_digits, report)
    if valid and cursor < len(text):
        report(ArgumentTrailingSuffix(text[cursor:]))
        valid = False
    return value, valid


def unary(op, x, report=log_diagnostic):
    if op is Operation.NEG:
        return -x
    if op is Operation.SQRT:
        if x > 0:
            return math.sqrt(x)
        report(InvalidDomain(op, x))
    return x


def _power(left, right):
    # IEEE pow results instead of exceptions: NaN for a negative base with a fractional
    # exponent, signed infinity on overflow and for a zero base with a negative exponent.
    odd_integer = right.is_integer() and right % 2 == 1
    try:
        return math.pow(left, right)
    except OverflowError:
        return -math.inf if left < 0 and odd_integer else math.inf
    except ValueError:
        if left == 0:
            return math.copysign(math.inf, left) if odd_integer else math.inf
        return math.nan


def _remainder(left, right):
    try:
        return math.fmod(left, right)
    except ValueError:
        # Infinite dividend.
        return math.nan


def binary(op, left, right, report=log_diagnostic):
    """!
    @brief Apply a binary operation to the accumulator (left) and an argument (right).
    @return (value, valid).  On failure value is left and the failure has been reported.
    """
    if op is Operation.SET:
        return right, True
    elif op is Operation.ADD:
        return left + right, True
    elif op is Operation.SUB:
        return left - right, True
    elif op is Operation.MUL:
        return left * right, True
    elif op is Operation.DIV:
        if right != 0:
            return left / right, True
    elif op is Operation.REM:
        if right != 0:
            return _remainder(left, right), True
    elif op is Operation.POW:
        return _power(float(left), float(right)), True
    else:
        return left, False
    report(InvalidDomain(op, right))
    return left, False


class Calculator:
    """!
    @brief Line evaluator with its operation table, digit budget and diagnostic channel.
    """
    def __init__(self,
                 tokens=None,
                 max_decimal_digits=None,
                 report=None,
                 ):
        """!
        @param[in] tokens		Optionally, a dict(str => Operation) replacing default_operation_tokens.
        @param[in] max_decimal_digits	Optionally, the digit budget of one argument.
        @param[in] report		Optionally, a callable receiving each CalcError; defaults to logging.
        """
        if tokens is None:
            tokens = default_operation_tokens
        for literal, op in tokens.items():
            # Brackets are reserved for folds.
            if literal == '' or literal[0] in _digits or literal[0].isspace() or '(' in literal or ')' in literal:
                raise ValueError('Illegal operation code %r' % (literal,))
            if op in (Operation.ERROR, Operation.SET):
                raise ValueError('%s has no operation code' % (op.name,))
        if max_decimal_digits is None:
            max_decimal_digits = default_max_decimal_digits
        if max_decimal_digits < 1:
            raise ValueError('max_decimal_digits must be positive')
        if report is None:
            report = log_diagnostic

        self.tokens = dict(tokens)
        self.literals = longest_first(self.tokens)
        self.max_decimal_digits = max_decimal_digits
        self.report = report

    def decode(self, line, cursor=0):
        return decode(line, cursor, self.tokens, self.report, self.literals)

    def parse_argument(self, text, cursor=0):
        return parse_argument(text, cursor, self.max_decimal_digits, self.report)

    def _fold_parts(self, line):
        # Split a fold line into (operation, argument text), or None if malformed.
        close = line.index(')')
        first_ws = next((i for i, c in enumerate(line) if c.isspace()), len(line))
        if close < first_ws:
            # (+) 1 2 3
            op, cursor = self.decode(line, 1)
            if op is Operation.ERROR:
                return None
            if cursor != close:
                self.report(MalformedFold("unexpected '%s' in operation brackets" % (line[cursor:close],)))
                return None
            return op, line[close+1:]
        # (+ 1 2 3)
        body = line.rstrip()
        if not body.endswith(')'):
            # No bracket stripping: the line decodes as is, so '(' is an unknown operation.
            self.decode(line)
            return None
        op, cursor = self.decode(line, 1)
        if op is Operation.ERROR:
            return None
        return op, body[cursor:-1]

    def fold(self, current, line):
        """!
        @brief Left-fold one binary operation over a bracketed argument list.
        @return The folded value, or current unchanged if any step fails.
        """
        parts = self._fold_parts(line)
        if parts is None:
            return current
        op, rest = parts
        if op.arity != 2 or op is Operation.SET:
            self.report(MalformedFold('only binary operations can be folded, not %s' % (op.name,)))
            return current
        args = rest.split()
        if len(args) == 0:
            self.report(MalformedFold('no arguments'))
            return current
        acc = current
        for arg_text in args:
            arg, valid = parse_complete_argument(arg_text, self.max_decimal_digits, self.report)
            if not valid:
                return current
            acc, valid = binary(op, acc, arg, self.report)
            if not valid:
                return current
        return acc

    def evaluate(self, current, line):
        """!
        @brief Apply one command line to the accumulator.
        @param[in] current	The accumulator, a float.
        @param[in] line		A str such as '+5', 'SQRT', '_' or '(* 2 3)'.
        @return The new accumulator.  Malformed input is reported and current is returned.
        """
        if is_fold(line):
            return self.fold(current, line)

        op, cursor = self.decode(line)
        if op.arity == 2:
            while cursor < len(line) and line[cursor].isspace():
                cursor += 1
            start = cursor
            arg, valid, cursor = self.parse_argument(line, cursor)
            if cursor == start:
                self.report(MissingArgument())
                return current
            if not valid:
                return current
            if cursor < len(line):
                self.report(ArgumentTrailingSuffix(line[cursor:]))
                return current
            value, valid = binary(op, current, arg, self.report)
            return value if valid else current
        elif op.arity == 1:
            if line[cursor:].strip() != '':
                self.report(ArgumentTrailingSuffix(line[cursor:], 'Unexpected suffix for a unary operation'))
                return current
            return unary(op, current, self.report)
        else:
            return current

    process_line = evaluate


default_calculator = Calculator()

def evaluate(accumulator, line):
    return default_calculator.evaluate(accumulator, line)

process_line = evaluate
