"""
Handpicked Collections

为前端首页提供人工精选内容集合的配置管理服务
"""

__version__ = "1.0.0"

PLUGIN_NAME = "Handpicked"
PLUGIN_DESCRIPTION = (
    "Allows administrators to create and display custom curated collections on the front page."
)
PLUGIN_AUTHOR = "Handpicked Contributors"
