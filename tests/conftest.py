from __future__ import annotations

from pathlib import Path

import pytest

IOS_API_HEADER = """\
#import <UIKit/UIKit.h>

@interface CloudXCore : NSObject
+ (instancetype)shared;
- (void)initializeSDKWithAppKey:(NSString *)appKey completion:(void (^)(BOOL success, NSError *error))completion;
- (CLXBannerAdView *)createBannerWithPlacement:(NSString *)placement viewController:(UIViewController *)viewController delegate:(id<CLXBannerDelegate>)delegate;
- (CLXBannerAdView *)createMRECWithPlacement:(NSString *)placement viewController:(UIViewController *)viewController delegate:(id<CLXMRECDelegate>)delegate;
- (CLXInterstitial *)createInterstitialWithPlacement:(NSString *)placement delegate:(id<CLXInterstitialDelegate>)delegate;
- (CLXRewardedAd *)createRewardedWithPlacement:(NSString *)placement delegate:(id<CLXRewardedDelegate>)delegate;
- (CLXNativeAd *)createNativeWithPlacement:(NSString *)placement viewController:(UIViewController *)viewController delegate:(id<CLXNativeDelegate>)delegate;
- (void)setCCPAPrivacyString:(NSString *)privacyString;
- (void)setIsUserConsent:(BOOL)consent;
- (void)setIsAgeRestrictedUser:(BOOL)restricted;
@end
"""

IOS_ADS_HEADER = """\
@interface CLXBannerAdView : UIView
@end
@interface CLXMRECAdView : UIView
@end
@interface CLXInterstitial : NSObject
- (void)showFromViewController:(UIViewController *)viewController;
@end
@interface CLXRewardedAd : NSObject
- (void)showFromViewController:(UIViewController *)viewController;
@end
@interface CLXNativeAd : UIView
@end

@protocol CLXBannerDelegate <NSObject>
- (void)bannerDidLoad:(CLXBannerAdView *)banner;
- (void)bannerDidFailToLoad:(CLXBannerAdView *)banner withError:(NSError *)error;
@end
@protocol CLXMRECDelegate <NSObject>
@end
@protocol CLXInterstitialDelegate <NSObject>
- (void)interstitialDidLoad:(CLXInterstitial *)interstitial;
- (void)interstitialDidFailToLoad:(CLXInterstitial *)interstitial withError:(NSError *)error;
@end
@protocol CLXRewardedDelegate <NSObject>
- (void)rewardedUserDidEarnReward:(CLXRewardedAd *)rewarded;
@end
@protocol CLXNativeDelegate <NSObject>
@end
"""

IOS_VERSION_M = 'NSString * const CLXSDKVersion = @"1.2.0";\n'

SDK_VERSION_YAML = """\
platforms:
  ios:
    sdk_version: "1.2.0"
  flutter:
    sdk_version: "0.9.1"
"""

IOS_INTEGRATOR_BODY = """\
# CloudX iOS Integrator

Banner, MREC and native ads need a UIViewController.

```swift
CloudXCore.shared.initializeSDKWithAppKey("KEY") { success, error in }
interstitial.show(from: self)
```
"""

FLUTTER_INTEGRATOR_BODY = """\
# CloudX Flutter Integrator

Use a StatefulWidget and clean up in dispose().

```dart
Future<void> initAds() async { await CloudX.initialize(appKey: 'KEY', allowIosExperimental: true); }
```

Place a CloudXBannerView or CloudXMRECView in the tree and pass a CloudXAdViewListener.
Fullscreen ads report through CloudXInterstitialListener.

```dart
@override
void dispose() { CloudXAds.destroyAd(adId: _adId); super.dispose(); }
```

Always check `if (mounted)` before setState.
"""

FLUTTER_PRIVACY_BODY = """\
# CloudX Flutter Privacy Checker

await CloudX.setCCPAPrivacyString('1YNN');
await CloudX.setGPPString(gpp);
await CloudX.setIsAgeRestrictedUser(false);
"""

FLUTTER_BUILD_BODY = """\
# CloudX Flutter Build Verifier

Run flutter pub get, then flutter analyze.
Build with flutter build apk and flutter build ios --no-codesign.
"""

FLUTTER_CLOUDX_DART = """\
class CloudX {
  static Future<bool> initialize({required String appKey, bool allowIosExperimental = false}) async => true;
  static Future<String?> createBanner({required String placement}) async => null;
  static Future<String?> createInterstitial({required String placement}) async => null;
  static Future<void> destroyAd({required String adId}) async {}
}
"""


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def agent_doc(name: str, body: str = "", tools: str = "Read, Write, Edit, Grep, Glob, Bash") -> str:
    return f"---\nname: {name}\ndescription: {name} agent\ntools: {tools}\nmodel: sonnet\n---\n\n{body}"


@pytest.fixture()
def agents_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "cloudx-sdk-agents"
    write(repo / "SDK_VERSION.yaml", SDK_VERSION_YAML)

    ios = repo / ".claude" / "agents" / "ios"
    write(ios / "cloudx-ios-integrator.md", agent_doc("cloudx-ios-integrator", IOS_INTEGRATOR_BODY))
    for role in ("auditor", "build-verifier", "privacy-checker"):
        write(ios / f"cloudx-ios-{role}.md", agent_doc(f"cloudx-ios-{role}", "# iOS\n"))

    flutter = repo / ".claude" / "agents" / "flutter"
    write(flutter / "cloudx-flutter-integrator.md", agent_doc("cloudx-flutter-integrator", FLUTTER_INTEGRATOR_BODY))
    write(flutter / "cloudx-flutter-auditor.md", agent_doc("cloudx-flutter-auditor", "# Auditor\n"))
    write(flutter / "cloudx-flutter-build-verifier.md", agent_doc("cloudx-flutter-build-verifier", FLUTTER_BUILD_BODY))
    write(
        flutter / "cloudx-flutter-privacy-checker.md",
        agent_doc("cloudx-flutter-privacy-checker", FLUTTER_PRIVACY_BODY),
    )
    return repo


@pytest.fixture()
def ios_sdk(tmp_path: Path) -> Path:
    sdk = tmp_path / "cloudx-ios-private"
    src = sdk / "core" / "Sources" / "CloudXCore"
    write(src / "CloudXCoreAPI.h", IOS_API_HEADER)
    write(src / "CLXAds.h", IOS_ADS_HEADER)
    write(src / "CLXVersion.m", IOS_VERSION_M)
    return sdk


@pytest.fixture()
def flutter_sdk(tmp_path: Path) -> Path:
    sdk = tmp_path / "cloudx-flutter" / "cloudx_flutter_sdk"
    write(sdk / "pubspec.yaml", "name: cloudx_flutter\nversion: 0.9.1\n")
    write(sdk / "lib" / "cloudx.dart", FLUTTER_CLOUDX_DART)
    write(sdk / "lib" / "widgets" / "cloudx_banner_view.dart", "class CloudXBannerView extends StatefulWidget {}\n")
    return sdk
