"""
NEAR support for the Circle SDK.

Builds the borsh-encoded, base64-wrapped delegate actions expected by the
``/v1/w3s/developer/sign/delegateAction`` endpoint.
"""
from .delegate import (
    NEP_461_PREFIX,
    encode_delegate_action,
    parse_near_public_key,
    serialize_action,
    serialize_delegate_action,
)
from .types import (
    AccessKey,
    AddKey,
    CreateAccount,
    DelegateAction,
    DeleteAccount,
    DeleteKey,
    DeployContract,
    FullAccessPermission,
    FunctionCall,
    FunctionCallPermission,
    KeyType,
    NearPublicKey,
    Stake,
    Transfer,
)

__all__ = [
    'NEP_461_PREFIX',
    'encode_delegate_action',
    'parse_near_public_key',
    'serialize_action',
    'serialize_delegate_action',
    'AccessKey',
    'AddKey',
    'CreateAccount',
    'DelegateAction',
    'DeleteAccount',
    'DeleteKey',
    'DeployContract',
    'FullAccessPermission',
    'FunctionCall',
    'FunctionCallPermission',
    'KeyType',
    'NearPublicKey',
    'Stake',
    'Transfer',
]
