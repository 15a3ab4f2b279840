# type: ignore
''' Line grammar '''

import pyparsing as pp

from regvm.asm.fpp import FPP


id = pp.Word(pp.alphas + '_', pp.alphanums + '_')
comment = pp.Suppress(pp.Regex(r'(//|#|;).*'))

label = (id + pp.Suppress(':')).set_parse_action(lambda r: (FPP.on_label, r[0]))

# Classified later, so that malformed operands get a precise diagnostic
operand = pp.Word(pp.printables, exclude_chars=',:;#/')
operands = pp.Optional(operand + pp.ZeroOrMore(pp.Optional(pp.Suppress(',')) + operand))

cmd = (id + pp.Group(operands)).set_parse_action(lambda r: (FPP.on_cmd, (r[0], list(r[1]))))

statement = pp.Optional(label) + pp.Optional(cmd) + pp.Optional(comment)
