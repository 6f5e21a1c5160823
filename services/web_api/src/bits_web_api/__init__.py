"""Bits 制品服务 Web API

应用由 bits_web_api.app_factory.create_app() 创建。
"""
