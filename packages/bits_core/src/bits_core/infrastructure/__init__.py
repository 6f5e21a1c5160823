"""
Infrastructure 模块

基础设施适配：
- storage: 制品存储（本地 / S3）
"""
