"""
Balance Preview

交易签名前的余额变动预览：解释交易模拟结果，给出用户的原生币与 Token 余额变动。
"""

__version__ = "0.1.0"
