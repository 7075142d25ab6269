"""
receiptoverse — verifiable purchase receipts as Hedera NFTs.

Write path: publish receipt metadata to IPFS, mint it as an NFT and
deliver the NFT plus a RECV reward to the customer in one transfer.
Read path: rebuild receipt records for every receipt NFT an account owns.
"""

__version__ = "0.1.0"
