''' Wrapper module for the equivalent of :func:`json.loads` and
    :func:`json.dumps`, used to carry arbitrary Python values in frame
    bodies. Both directions work with bytes, which is what a frame body
    holds.
'''

import msgspec


encoder = msgspec.json.Encoder()
decoder = msgspec.json.Decoder()

dumps = encoder.encode
loads = decoder.decode

content_type = 'application/json'

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
