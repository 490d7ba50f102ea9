"""版本信息"""

__version__ = "0.3.0"
__author__ = "ssodir team"
__description__ = "组织目录（SSO）层级解析与团队组装类库"
