#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Exceptions
#
# Redemption callers should only ever catch InvalidToken and show one generic
# message; the subclasses exist so each check can be tested on its own.
#

class InvalidToken(RuntimeError):
    def __init__(self, msg='Invalid token', code=400):
        self.code = code
        self.raw_msg = msg
        super().__init__(msg)

class MalformedToken(InvalidToken):
    # wrong separator count, bad base64url
    pass

class InvalidSignature(InvalidToken):
    def __init__(self, msg='Bad signature', code=401):
        super().__init__(msg, code)

class DecodeError(InvalidToken):
    # payload was signed correctly, but doesn't parse
    pass

class MissingField(DecodeError):
    pass

class MalformedField(DecodeError):
    pass

# EOF
