"""
WeChat Pay v2 envelope protocol: codec, signer, crypto, status validation,
request assembly and callback parsing.
"""
