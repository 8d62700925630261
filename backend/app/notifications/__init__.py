# backend/app/notifications/__init__.py

"""
プッシュ通知レイヤ用モジュール群。

構成イメージ:
- schemas: 通知イベント / ペイロード / マルチキャスト送受信のスキーマ
- payloads: イベント種別ごとのタイトル・本文テンプレート
- transport: FCM / ログ出力のトランスポート実装
- dispatcher: 1回のマルチキャストで家族の端末へ配信するディスパッチャ
- factory: 設定に応じたトランスポートの生成
"""
